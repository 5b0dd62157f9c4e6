__all__ = ["router", "cleanup", "upload"]

from . import cleanup, upload
from .router import router
