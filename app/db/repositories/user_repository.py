"""User store: lookups by key, by email and by attached interests."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Interest, User, user_interests


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_all(self) -> Sequence[User]:
        result = await self._session.execute(select(User).order_by(User.id))
        return result.scalars().all()

    async def add(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        # Load server defaults and the interests collection; async sessions cannot lazy load.
        await self._session.refresh(user)
        return user

    async def find_by_interest_type(self, interest_type: str) -> Sequence[User]:
        """Return users having the interest, compared case-insensitively."""
        matching_ids = (
            select(user_interests.c.user_id)
            .join(Interest, Interest.id == user_interests.c.interest_id)
            .where(func.lower(Interest.interest_type) == func.lower(interest_type))
        )
        result = await self._session.execute(
            select(User).where(User.id.in_(matching_ids)).order_by(User.id)
        )
        return result.scalars().all()

    async def find_by_all_interest_types(self, interest_types: Collection[str]) -> Sequence[User]:
        """Return users having every requested interest.

        The required match count is the size of ``interest_types`` as given, so a
        request holding two names that differ only by case can never match.
        """
        if not interest_types:
            return []
        lowered = [name.lower() for name in interest_types]
        matching_ids = (
            select(user_interests.c.user_id)
            .join(Interest, Interest.id == user_interests.c.interest_id)
            .where(func.lower(Interest.interest_type).in_(lowered))
            .group_by(user_interests.c.user_id)
            .having(func.count(distinct(Interest.id)) == len(interest_types))
        )
        result = await self._session.execute(
            select(User).where(User.id.in_(matching_ids)).order_by(User.id)
        )
        return result.scalars().all()

    async def find_by_any_interest_types(self, interest_types: Collection[str]) -> Sequence[User]:
        """Return users having at least one of the requested interests, once each."""
        if not interest_types:
            return []
        lowered = [name.lower() for name in interest_types]
        matching_ids = (
            select(user_interests.c.user_id)
            .join(Interest, Interest.id == user_interests.c.interest_id)
            .where(func.lower(Interest.interest_type).in_(lowered))
        )
        result = await self._session.execute(
            select(User).where(User.id.in_(matching_ids)).order_by(User.id)
        )
        return result.scalars().all()

    async def delete(self, user: User) -> None:
        """Delete the user. Messages, photos and interest links go with it via ON DELETE CASCADE."""
        await self._session.delete(user)
        await self._session.flush()
