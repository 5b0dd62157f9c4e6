__all__ = ["json_loads", "json_dumps"]

import datetime
from collections.abc import Callable
from typing import Any

import orjson
from pydantic import BaseModel


def json_default_handler(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()

    if isinstance(value, datetime.datetime):
        return value.isoformat()

    if isinstance(value, set):
        return list(value)

    raise TypeError(f"Type {type(value)} is not JSON serializable")


def json_loads(data: str | bytes) -> Any:
    """Load JSON data."""
    return orjson.loads(data)


def json_dumps(data: Any, *, default: Callable[[Any], Any] | None = None) -> str:
    """Dump JSON data."""
    return orjson.dumps(
        data,
        default=default or json_default_handler,
        option=orjson.OPT_SORT_KEYS,
    ).decode()
