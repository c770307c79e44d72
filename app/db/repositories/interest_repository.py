from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Interest


class InterestRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, interest_id: int) -> Interest | None:
        return await self._session.get(Interest, interest_id)

    async def get_by_interest_type(self, interest_type: str) -> Interest | None:
        result = await self._session.execute(
            select(Interest).where(Interest.interest_type == interest_type)
        )
        return result.scalar_one_or_none()

    async def get_by_interest_type_ignore_case(self, interest_type: str) -> Interest | None:
        # The unique index is case-sensitive, so "Music" and "music" may both exist.
        result = await self._session.execute(
            select(Interest)
            .where(func.lower(Interest.interest_type) == func.lower(interest_type))
            .order_by(Interest.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def exists_by_interest_type(self, interest_type: str) -> bool:
        result = await self._session.execute(
            select(exists().where(Interest.interest_type == interest_type))
        )
        return bool(result.scalar())

    async def exists_by_interest_type_ignore_case(self, interest_type: str) -> bool:
        result = await self._session.execute(
            select(
                exists().where(func.lower(Interest.interest_type) == func.lower(interest_type))
            )
        )
        return bool(result.scalar())

    async def add(self, interest: Interest) -> Interest:
        self._session.add(interest)
        await self._session.flush()
        return interest
