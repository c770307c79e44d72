from __future__ import annotations

import logging

from app.core.config import settings


# Centralized app logging configuration (format + level).
def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    # SQL statement echo is controlled separately from the app level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
