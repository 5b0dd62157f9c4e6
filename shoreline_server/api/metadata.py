__all__ = ["app_meta", "__version__"]

from typing import Any

from shoreline_server.version import __version__

app_meta: dict[str, Any] = {
    "title": "Shoreline Woodworks",
    "description": "Website and content management API",
    "version": __version__,
}
