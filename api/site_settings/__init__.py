__all__ = ["router", "site_settings"]

from . import site_settings
from .router import router
