from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Photo


class PhotoRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, photo: Photo) -> Photo:
        self._session.add(photo)
        await self._session.flush()
        return photo

    async def save_all(self, photos: Sequence[Photo]) -> Sequence[Photo]:
        self._session.add_all(photos)
        await self._session.flush()
        return photos

    async def find_by_user_id(self, user_id: int) -> Sequence[Photo]:
        result = await self._session.execute(
            select(Photo).where(Photo.user_id == user_id).order_by(Photo.id)
        )
        return result.scalars().all()

    async def get_by_id_and_user_id(self, photo_id: int, user_id: int) -> Photo | None:
        result = await self._session.execute(
            select(Photo).where(Photo.id == photo_id, Photo.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def clear_main_photos(self, user_id: int) -> None:
        """Unset the main flag on every photo the user owns."""
        await self._session.execute(
            update(Photo)
            .where(Photo.user_id == user_id, Photo.is_main.is_(True))
            .values(is_main=False)
            .execution_options(synchronize_session="fetch")
        )

    async def delete(self, photo: Photo) -> None:
        await self._session.delete(photo)
        await self._session.flush()
