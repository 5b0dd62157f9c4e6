__all__ = ["auth", "router"]

from . import auth
from .router import router
