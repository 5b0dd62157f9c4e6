__all__ = ["router", "order", "projects"]

from . import order, projects
from .router import router
