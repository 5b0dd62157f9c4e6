__all__ = ["router", "tags"]

from . import tags
from .router import router
