from __future__ import annotations

import logging
import sys
import types
from importlib.metadata import PackageNotFoundError, version
from typing import cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from app.core.errors import InvalidSettingsError, MissingRequiredSettingsError

# Import settings first - this may raise MissingRequiredSettingsError. Every other
# app module reads settings at import time, so they are imported below this block.
try:
    from app.core.config import settings
except MissingRequiredSettingsError as e:
    print("ERROR: Missing required environment variables:", file=sys.stderr)
    for field in e.missing_fields:
        print(f"  - {field}", file=sys.stderr)
    print(
        "\nPlease set these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)
except InvalidSettingsError as e:
    print("ERROR: Invalid environment variable values:", file=sys.stderr)
    for field, message in e.invalid_fields:
        print(f"  - {field}: {message}", file=sys.stderr)
    print(
        "\nPlease update these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)

from app.api.router import router as api_router  # noqa: E402
from app.core.errors import (  # noqa: E402
    DomainError,
    domain_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from app.core.lifespan import lifespan  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.services.message_service import message_service_factory_provider  # noqa: E402
from app.services.photo_service import photo_service_factory_provider  # noqa: E402
from app.services.photo_storage import PhotoStorage  # noqa: E402
from app.services.user_service import user_service_factory_provider  # noqa: E402


def create_app() -> FastAPI:
    configure_logging()

    try:
        api_version = version("meetyou-api")
    except PackageNotFoundError:
        api_version = "0.1.0"  # Fallback if package not installed
        logging.warning("meetyou-api package not found, using fallback version 0.1.0")

    is_debug_mode = settings.environment == "local"
    app = FastAPI(
        title=settings.app_name,
        version=api_version,
        debug=is_debug_mode,
        lifespan=lifespan,
    )
    app.add_exception_handler(DomainError, cast(ExceptionHandler, domain_exception_handler))
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, unhandled_exception_handler))
    app.include_router(api_router, prefix="/api")

    photo_storage = PhotoStorage(settings.photo_storage_dir)
    _services = {
        "user_service": user_service_factory_provider(photo_storage),
        "message_service": message_service_factory_provider(),
        "photo_service": photo_service_factory_provider(photo_storage),
    }
    app.state.services = types.MappingProxyType(_services)

    return app


app = create_app()
