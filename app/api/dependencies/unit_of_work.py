"""Unit of Work: one transaction per request, session-scoped services from registry."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, cast

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session_maker
from app.services.message_service import MessageService
from app.services.photo_service import PhotoService
from app.services.user_service import UserService


class UnitOfWork:
    """Holds the request's session and exposes session-scoped services from the registry."""

    def __init__(self, session: AsyncSession, services: Mapping[str, Any]) -> None:
        self._session = session
        self._services = services
        self._resolved: dict[str, Any] = {}

    @property
    def session(self) -> AsyncSession:
        return self._session

    def _resolve(self, key: str) -> Any:
        if key not in self._resolved:
            service = self._services[key]
            self._resolved[key] = service(self._session) if callable(service) else service
        return self._resolved[key]

    @property
    def user_service(self) -> UserService:
        """Session-scoped user service."""
        return cast(UserService, self._resolve("user_service"))

    @property
    def message_service(self) -> MessageService:
        """Session-scoped message service."""
        return cast(MessageService, self._resolve("message_service"))

    @property
    def photo_service(self) -> PhotoService:
        """Session-scoped photo service."""
        return cast(PhotoService, self._resolve("photo_service"))


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
