from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from app.core.config import settings
from app.db.session import dispose_engine, get_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Check the database and prepare photo storage on startup; release the engine on exit."""
    try:
        if settings.environment != "test":
            await verify_database_connection()
            settings.photo_storage_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Photo storage ready at %s", settings.photo_storage_dir.resolve())
        yield
    finally:
        await dispose_engine()
        logger.debug("Database engine disposed")


async def verify_database_connection() -> None:
    """Run a trivial query so a bad DSN fails startup instead of the first request."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        raise RuntimeError(f"Failed to connect to database: {e}") from e
