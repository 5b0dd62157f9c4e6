from typing import Any

from redis import asyncio as aioredis

from shoreline_server.config import shorelineconfig
from shoreline_server.utils import json_dumps, json_loads


class Redis:
    connected: bool = False
    redis_pool: aioredis.Redis
    prefix: str = ""

    @classmethod
    async def connect(cls) -> None:
        """Create a Redis connection pool"""
        cls.redis_pool = aioredis.from_url(shorelineconfig.redis_url)

        try:
            res = await cls.redis_pool.ping()
            if not res:
                raise ConnectionError("Failed to connect to Redis")
        except Exception as e:
            raise ConnectionError("Failed to connect to Redis") from e

        cls.connected = True
        cls.prefix = (
            f"{shorelineconfig.redis_key_prefix}-"
            if shorelineconfig.redis_key_prefix
            else ""
        )

    @classmethod
    async def get(cls, namespace: str, key: str) -> Any:
        """Get a value from Redis"""
        if not cls.connected:
            await cls.connect()
        value = await cls.redis_pool.get(f"{cls.prefix}{namespace}-{key}")
        return value

    @classmethod
    async def get_json(cls, namespace: str, key: str) -> Any:
        """Get a JSON-serialized value from Redis"""
        value = await cls.get(namespace, key)
        if value is None:
            return None
        try:
            return json_loads(value)
        except Exception as e:
            raise ValueError(f"Invalid JSON in {namespace}-{key}") from e

    @classmethod
    async def set(
        cls, namespace: str, key: str, value: str | bytes, ttl: int = 0
    ) -> None:
        """Create/update a record in Redis

        Optional ttl argument may be provided to set expiration time.
        """
        if not cls.connected:
            await cls.connect()
        command = ["set", f"{cls.prefix}{namespace}-{key}", value]
        if ttl:
            command.extend(["ex", str(ttl)])

        await cls.redis_pool.execute_command(*command)

    @classmethod
    async def set_json(cls, namespace: str, key: str, value: Any, ttl: int = 0) -> None:
        """Create/update a record in Redis with JSON-serialized value"""
        payload = json_dumps(value)
        await cls.set(namespace, key, payload, ttl)

    @classmethod
    async def delete(cls, namespace: str, key: str) -> None:
        """Delete a record from Redis"""
        if not cls.connected:
            await cls.connect()
        await cls.redis_pool.delete(f"{cls.prefix}{namespace}-{key}")

    @classmethod
    async def incr(cls, namespace: str, key: str) -> int:
        """Increment a value in Redis"""
        if not cls.connected:
            await cls.connect()
        res = await cls.redis_pool.incr(f"{cls.prefix}{namespace}-{key}")
        return res

    @classmethod
    async def expire(cls, namespace: str, key: str, ttl: int) -> None:
        """Set a TTL for a key in Redis"""
        if not cls.connected:
            await cls.connect()
        await cls.redis_pool.expire(f"{cls.prefix}{namespace}-{key}", ttl)

    @classmethod
    async def shutdown(cls) -> None:
        if cls.connected:
            await cls.redis_pool.aclose()
            cls.connected = False
