from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from shoreline_server.background.workers import background_workers
from shoreline_server.lib.postgres import Postgres
from shoreline_server.lib.redis import Redis
from shoreline_server.logging import logger

if TYPE_CHECKING:
    from fastapi import FastAPI


@asynccontextmanager
async def lifespan(app: "FastAPI"):
    await Postgres.connect()
    await Redis.connect()

    background_workers.start()

    logger.info("Server is now ready to connect")
    logger.trace(f"{len(app.routes)} routes registered")

    yield

    logger.info("Server is shutting down")
    await background_workers.shutdown()
    await Redis.shutdown()
    await Postgres.shutdown()
    logger.info("Server stopped")
