import time

from fastapi import Request, Response
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse
from shortuuid import ShortUUID
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect

from shoreline_server.exceptions import ShorelineException
from shoreline_server.logging import log_exception, logger


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.status_code,
            "detail": exc.detail,
            "path": request.url.path,
        },
    )


def handle_shoreline_exception(
    request: Request, exc: ShorelineException
) -> JSONResponse:
    if exc.status in [401, 403, 503]:
        # unauthorized, forbidden, service unavailable
        # we don't need any additional details for these
        if exc.status == 503:
            logger.warning(f"{request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status,
            content={
                "code": exc.status,
                "error": exc.code,
                "detail": exc.detail,
            },
        )

    if exc.status >= 500:
        logger.error(f"{exc}")
    else:
        logger.debug(f"{exc}")

    return JSONResponse(
        status_code=exc.status,
        content={
            "code": exc.status,
            "error": exc.code,
            "detail": exc.detail,
            **exc.extra,
        },
    )


def handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    extras = {"path": request.url.path}
    if getattr(request.state, "user", None):
        extras["user"] = request.state.user.email

    log_exception(exc, **extras)

    # Tracebacks stay in the log, never in the response
    return JSONResponse(
        status_code=500,
        content={
            "code": 500,
            "error": "internal-error",
            "detail": "Internal server error",
        },
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = ShortUUID().random(length=16)
        context = {"request_id": request_id}
        path = request.url.path

        with logger.contextualize(**context):
            start_time = time.perf_counter()
            try:
                response = await call_next(request)
            except ShorelineException as e:
                response = handle_shoreline_exception(request, e)

            except ClientDisconnect:
                response = Response(status_code=499)

            except HTTPException as e:
                # FastAPI / Starlette HTTP exceptions
                response = handle_http_exception(request, e)

            except Exception as e:
                response = handle_unhandled_exception(request, e)

            if path.startswith("/api"):
                extras = {}
                if getattr(request.state, "user", None):
                    extras["user"] = request.state.user.email

                process_time = round(time.perf_counter() - start_time, 3)
                f_result = f"| {response.status_code} in {process_time}s"
                with logger.contextualize(**extras):
                    logger.trace(f"[{request.method}] {path} {f_result}")

        return response
