__all__ = ["router", "contact"]

from . import contact
from .router import router
