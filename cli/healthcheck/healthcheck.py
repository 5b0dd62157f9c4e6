import json
import sys
from typing import Any

import asyncpg

from shoreline_server.cli import app
from shoreline_server.lib.postgres import Postgres
from shoreline_server.lib.redis import Redis


class HealthCheckError(Exception):
    pass


async def ensure_postgres_connection(result: dict[str, Any]) -> None:
    try:
        await Postgres.connect()
        await Postgres.fetch("SELECT 1")
    except ConnectionRefusedError as e:
        result["status"] = "failed"
        result["error"] = "PostgreSQL connection refused"
        result["details"] = str(e)

    except asyncpg.exceptions.CannotConnectNowError as e:
        result["status"] = "failed"
        result["error"] = "PostgreSQL cannot connect now"
        result["details"] = str(e)

    except Exception as e:
        result["status"] = "failed"
        result["error"] = "PostgreSQL connection error"
        result["details"] = str(e)

    else:
        result["checks"]["postgres_connected"] = True
        return

    raise HealthCheckError()


async def ensure_redis_connection(result: dict[str, Any]) -> None:
    try:
        await Redis.connect()
    except ConnectionError as e:
        result["status"] = "failed"
        result["error"] = "Redis connection error"
        result["details"] = str(e)
        raise HealthCheckError() from e

    result["checks"]["redis_connected"] = True


@app.command()
async def healthcheck() -> None:
    """Check the database and Redis connections."""
    result: dict[str, Any] = {"status": "ok", "checks": {}}

    try:
        await ensure_postgres_connection(result)
        await ensure_redis_connection(result)
    except HealthCheckError:
        status_code = 1
    else:
        status_code = 0
    finally:
        await Postgres.shutdown()
        await Redis.shutdown()

    print(json.dumps(result, indent=2))
    sys.exit(status_code)
