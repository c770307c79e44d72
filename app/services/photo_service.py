"""Photo management: uploads, updates, deletion and the per-user main photo."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    DomainError,
    InvalidInputError,
    NotFoundError,
    PartialContentError,
    StorageError,
)
from app.db.models import Photo, User
from app.db.repositories import PhotoRepository, UserRepository
from app.schemas.photo import PhotoUpdate
from app.services.photo_storage import PhotoStorage

logger = logging.getLogger(__name__)

TRUE_STRING = "true"
FALSE_STRING = "false"
UNNAMED_FILE = "<unnamed>"


@dataclass
class PhotoBatchResult:
    """Outcome of a multi-file upload: what was stored and what was not."""

    saved: list[Photo] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.saved) and bool(self.failed_files)

    def raise_for_partial(self) -> None:
        """Raise PartialContentError if some files were stored and others failed."""
        if self.is_partial:
            raise PartialContentError(
                f"Photos partially added, failed to save: {', '.join(self.failed_files)}",
                details={
                    "saved_photo_ids": [photo.id for photo in self.saved],
                    "failed_files": list(self.failed_files),
                },
            )


def parse_is_main(value: str | None) -> bool:
    """Accept only the literals "true" and "false" (or no value) for the main flag."""
    if value is None:
        return False
    if value not in (TRUE_STRING, FALSE_STRING):
        logger.warning("Invalid is_main value: %r", value)
        raise InvalidInputError("is_main must be 'true' or 'false'")
    return value == TRUE_STRING


def validate_id(value: int | None, kind: str) -> int:
    if value is None or value <= 0:
        logger.warning("Invalid %s id: %s", kind, value)
        raise InvalidInputError(f"Invalid {kind} id")
    return value


class PhotoService:
    """Stores user photos on disk and keeps at most one of them flagged as main.

    The single-main rule is kept by clearing the flag on all of a user's photos
    before setting it on one, inside the caller's transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: PhotoStorage,
        max_photo_bytes: int | None = None,
    ) -> None:
        self._users = UserRepository(session)
        self._photos = PhotoRepository(session)
        self._storage = storage
        self._max_photo_bytes = max_photo_bytes or settings.max_photo_bytes

    async def _get_user(self, user_id: int) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    async def _read_image(self, file: UploadFile) -> bytes:
        """Return the upload's bytes if it is a non-empty image within the size limit.

        At most one byte past the limit is read, so oversized uploads are never
        buffered in full.
        """
        try:
            content = await file.read(self._max_photo_bytes + 1)
        except (OSError, ValueError) as e:
            logger.error("Failed to read upload %s: %s", file.filename, e, exc_info=e)
            raise StorageError("Failed to read file") from e
        if not content:
            logger.warning("Empty file passed: %s", file.filename)
            raise InvalidInputError("File must not be empty")
        content_type = file.content_type
        if content_type is None or not content_type.startswith("image/"):
            logger.warning("Invalid file content type: %s", content_type)
            raise InvalidInputError("File must be an image")
        if len(content) > self._max_photo_bytes:
            logger.warning("File %s exceeds %d bytes", file.filename, self._max_photo_bytes)
            raise InvalidInputError(f"File must not exceed {self._max_photo_bytes} bytes")
        return content

    async def add_photo(self, user_id: int, file: UploadFile | None, is_main: str | None) -> Photo:
        """Store one uploaded photo for a user.

        Raises:
            InvalidInputError: For a bad id, file, extension or is_main value.
            NotFoundError: If the user does not exist.
            StorageError: If the upload cannot be read or the file cannot be written.
        """
        validate_id(user_id, "user")
        if file is None:
            logger.warning("No file passed for user %s", user_id)
            raise InvalidInputError("File must not be empty")
        content = await self._read_image(file)
        main = parse_is_main(is_main)

        user = await self._get_user(user_id)
        path = await self._storage.save(content, file.filename)

        try:
            if main:
                logger.debug("Clearing current main photos for user %s", user_id)
                await self._photos.clear_main_photos(user.id)

            photo = await self._photos.save(
                Photo(user_id=user.id, photo_url=str(path), is_main=main, upload_date=date.today())
            )
        except Exception:
            logger.error("Failed to record photo %s for user %s, removing file", path, user_id)
            await self._storage.delete(str(path))
            raise
        logger.info("Photo %s added for user %s", photo.id, user_id)
        return photo

    async def get_all_user_photos(self, user_id: int) -> Sequence[Photo]:
        validate_id(user_id, "user")
        logger.debug("Loading all photos for user %s", user_id)
        photos = await self._photos.find_by_user_id(user_id)
        if not photos:
            logger.info("No photos found for user %s", user_id)
        return photos

    async def get_photo_by_id(self, user_id: int, photo_id: int) -> Photo:
        validate_id(user_id, "user")
        validate_id(photo_id, "photo")
        photo = await self._photos.get_by_id_and_user_id(photo_id, user_id)
        if photo is None:
            raise NotFoundError(f"Photo with id {photo_id} for user with id {user_id} not found")
        return photo

    async def update_photo(
        self, user_id: int, photo_id: int, photo_details: PhotoUpdate | None
    ) -> Photo:
        """Apply the non-empty fields of ``photo_details`` to an existing photo."""
        validate_id(user_id, "user")
        validate_id(photo_id, "photo")
        if photo_details is None:
            raise InvalidInputError("Photo details must not be empty")
        if photo_details.photo_url is None or not photo_details.photo_url.strip():
            logger.warning("Empty photo URL in update for photo %s", photo_id)
            raise InvalidInputError("Photo URL must not be empty")

        photo = await self.get_photo_by_id(user_id, photo_id)

        if photo_details.is_main and not photo.is_main:
            logger.debug("Clearing current main photos for user %s", user_id)
            await self._photos.clear_main_photos(user_id)

        photo.photo_url = photo_details.photo_url
        if photo_details.is_main is not None:
            photo.is_main = photo_details.is_main
        if photo_details.upload_date is not None:
            photo.upload_date = photo_details.upload_date

        await self._photos.save(photo)
        logger.info("Photo %s updated for user %s", photo_id, user_id)
        return photo

    async def delete_photo(self, user_id: int, photo_id: int) -> None:
        """Delete a photo record. The backing file is removed on a best-effort basis."""
        photo = await self.get_photo_by_id(user_id, photo_id)
        await self._storage.delete(photo.photo_url)
        await self._photos.delete(photo)
        if photo.is_main:
            logger.debug("Deleted the main photo of user %s", user_id)
        logger.info("Photo %s deleted for user %s", photo_id, user_id)

    async def add_multiple_photos(
        self,
        user_id: int,
        files: Sequence[UploadFile] | None,
        is_main: str | None,
    ) -> PhotoBatchResult:
        """Store several photos, collecting per-file failures instead of stopping.

        When ``is_main`` is "true" only the first stored file becomes the main photo.

        Raises:
            InvalidInputError: For a bad id or is_main value, or when no file could be stored.
            NotFoundError: If the user does not exist.
        """
        validate_id(user_id, "user")
        if not files:
            logger.debug("Empty file list passed for user %s", user_id)
            return PhotoBatchResult()

        main_requested = parse_is_main(is_main)
        user = await self._get_user(user_id)
        if main_requested:
            logger.debug("Clearing current main photos for user %s", user_id)
            await self._photos.clear_main_photos(user.id)

        result = PhotoBatchResult()
        pending: list[Photo] = []
        for file in files:
            filename = file.filename or UNNAMED_FILE
            try:
                content = await self._read_image(file)
                path = await self._storage.save(content, file.filename)
            except DomainError as e:
                logger.error("Could not store file %s for user %s: %s", filename, user_id, e)
                result.failed_files.append(filename)
                continue
            pending.append(
                Photo(
                    user_id=user.id,
                    photo_url=str(path),
                    is_main=main_requested and not pending,
                    upload_date=date.today(),
                )
            )

        if not pending:
            raise InvalidInputError(
                f"Failed to save any file: {', '.join(result.failed_files)}",
                details={"failed_files": result.failed_files},
            )

        try:
            result.saved = list(await self._photos.save_all(pending))
        except Exception:
            logger.error(
                "Failed to record %d photos for user %s, removing files", len(pending), user_id
            )
            for photo in pending:
                await self._storage.delete(photo.photo_url)
            raise
        logger.info("Added %d photos for user %s", len(result.saved), user_id)
        if result.failed_files:
            logger.warning("Failed to save files for user %s: %s", user_id, result.failed_files)
        return result

    async def set_photo_as_main(self, user_id: int, photo_id: int) -> Photo:
        validate_id(user_id, "user")
        validate_id(photo_id, "photo")

        await self._photos.clear_main_photos(user_id)
        photo = await self.get_photo_by_id(user_id, photo_id)
        photo.is_main = True

        await self._photos.save(photo)
        logger.info("Photo %s set as main for user %s", photo_id, user_id)
        return photo


def photo_service_factory_provider(
    storage: PhotoStorage | None = None,
) -> Callable[[AsyncSession], PhotoService]:
    """Return a factory that builds a PhotoService bound to a session."""
    photo_storage = storage or PhotoStorage(settings.photo_storage_dir)

    def factory(session: AsyncSession) -> PhotoService:
        return PhotoService(session, photo_storage)

    return factory
