__all__ = ["shorelineconfig", "ShorelineConfig"]

from .shorelineconfig import ShorelineConfig, shorelineconfig
