__all__ = [
    "camelize",
    "create_hash",
    "create_uuid",
    "hash_data",
    "indent",
    "json_dumps",
    "json_loads",
    "parse_access_token",
    "parse_bearer_token",
]

from .hashing import create_hash, create_uuid, hash_data
from .json import json_dumps, json_loads
from .strings import camelize, indent, parse_access_token, parse_bearer_token
