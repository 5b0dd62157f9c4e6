from pathlib import Path

from shoreline_server.cli import app
from shoreline_server.lib.postgres import Postgres
from shoreline_server.logging import logger

SCHEMA_PATH = Path("schemas/schema.public.sql")


@app.command()
async def setup() -> None:
    """Create or update the database schema."""

    logger.info("Starting setup")
    await Postgres.connect()
    try:
        schema = SCHEMA_PATH.read_text()
        await Postgres.execute(schema)
    finally:
        await Postgres.shutdown()
    logger.info("Database schema is up to date")
