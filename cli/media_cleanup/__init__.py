from . import media_cleanup as media_cleanup
