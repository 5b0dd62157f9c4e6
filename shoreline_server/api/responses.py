from typing import Any

from fastapi.responses import Response

from shoreline_server.types import OPModel


class ErrorResponse(OPModel):
    code: int
    error: str
    detail: str


class EmptyResponse(Response):
    def __init__(self, status_code: int = 204, **kwargs: Any) -> None:
        super().__init__(status_code=status_code, **kwargs)


class ResponseFactory:
    @staticmethod
    def error(status_code: int, description: str | None = None) -> dict[str, Any]:
        """Describe an error response in the OpenAPI schema"""
        return {
            "model": ErrorResponse,
            "description": description or f"Error {status_code}",
        }
