import importlib
import os
import sys
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.docs import get_redoc_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.routing import APIRoute

from shoreline_server.api.auth import AuthMiddleware
from shoreline_server.api.lifespan import lifespan
from shoreline_server.api.logging import LoggingMiddleware
from shoreline_server.api.metadata import app_meta
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import NotFoundException
from shoreline_server.logging import log_traceback, logger

app = FastAPI(
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    **app_meta,
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(AuthMiddleware)


#
# Documentation and OpenAPI endpoints
#


@app.get("/openapi.json", include_in_schema=False)
async def openapi() -> dict[str, Any]:
    """Return OpenAPI schema"""

    if shorelineconfig.disable_rest_docs:
        raise NotFoundException("OpenAPI documentation is disabled")

    return get_openapi(
        title=app_meta["title"],
        version=app_meta["version"],
        routes=app.routes,
        description=app_meta["description"],
    )


@app.get("/docs", include_in_schema=False)
async def docs() -> HTMLResponse:
    """Return the OpenAPI documentation page"""

    if shorelineconfig.disable_rest_docs:
        raise NotFoundException("OpenAPI documentation is disabled")

    return get_redoc_html(
        openapi_url="/openapi.json",
        title=app_meta["title"],
    )


#
# Handle request errors (not covered by the logging middleware)
#


@app.exception_handler(404)
def not_found_handler(request: Request, _):
    """Handle 404 errors"""
    return JSONResponse(
        status_code=404,
        content={
            "code": 404,
            "error": "not-found",
            "detail": f"API endpoint {request.url.path} not found",
            "path": request.url.path,
        },
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    extras = {}
    if getattr(request.state, "user", None):
        extras["user"] = request.state.user.email

    # use traceback field to pass the details
    # so they are formatted nicely in the log

    traceback_msg = ""
    for error in exc.errors():
        loc = error["loc"]
        if len(loc) > 1:
            loc = loc[1:]
        loc = ".".join(str(x) for x in loc)
        traceback_msg += f"{loc}: {error['msg']}\n"

    detail = f"Request validation error in [{request.method.upper()}] {request.url.path}"

    extras["traceback"] = traceback_msg.strip()
    logger.debug(detail, **extras)
    return JSONResponse(
        status_code=400,
        content={
            "code": 400,
            "error": "bad-request",
            "detail": detail,
            "path": request.url.path,
            "errors": [
                {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ],
        },
    )


#
# REST endpoints
#


def init_api(target_app: FastAPI, plugin_dir: str = "api") -> None:
    """Register API modules to the server"""

    if not os.path.isdir(plugin_dir):
        logger.error(f"API modules directory {plugin_dir} does not exist")
        return

    sys.path.insert(0, plugin_dir)
    for module_name in sorted(os.listdir(plugin_dir)):
        if not os.path.isfile(os.path.join(plugin_dir, module_name, "__init__.py")):
            continue

        try:
            module = importlib.import_module(module_name)
        except ImportError:
            log_traceback(f"Unable to initialize {module_name}")
            continue

        if not hasattr(module, "router"):
            logger.debug(f"API plug-in '{module_name}' has no router")
            continue

        target_app.include_router(module.router, prefix="/api")

    # Use endpoints function names as operation_ids
    for route in target_app.routes:
        if isinstance(route, APIRoute):
            if route.operation_id is None:
                route.operation_id = route.name


init_api(app, shorelineconfig.api_modules_dir)
