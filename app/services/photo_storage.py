"""Local filesystem storage for uploaded photo bytes."""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from app.core.errors import InvalidInputError, StorageError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSION_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|bmp)", re.IGNORECASE)


def get_file_extension(filename: str | None) -> str:
    """Return the extension of ``filename`` (with the dot) if it is an allowed image type.

    Raises:
        InvalidInputError: If the name has no extension or the extension is not allowed.
    """
    if not filename or "." not in filename:
        raise InvalidInputError("File must have an extension")
    extension = filename[filename.rindex(".") :]
    if not ALLOWED_EXTENSION_PATTERN.fullmatch(extension):
        raise InvalidInputError("Invalid file extension")
    return extension


class PhotoStorage:
    """Writes photo files under a single root directory and removes them again."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root.resolve()

    def resolve_target(self, file_name: str) -> Path:
        """Resolve ``file_name`` inside the storage root.

        Raises:
            InvalidInputError: If the resolved path escapes the storage root.
        """
        root = self.root
        target = (root / file_name).resolve()
        if not target.is_relative_to(root):
            logger.warning("Rejected photo path outside storage root: %s", file_name)
            raise InvalidInputError("Invalid file path")
        return target

    async def save(self, content: bytes, original_filename: str | None) -> Path:
        """Store ``content`` under a fresh unique name and return the absolute path.

        Raises:
            InvalidInputError: If the extension is not allowed or the path escapes the root.
            StorageError: If the file cannot be written.
        """
        extension = get_file_extension(original_filename)
        target = self.resolve_target(f"{uuid.uuid4()}{extension}")
        try:
            await run_in_threadpool(target.parent.mkdir, parents=True, exist_ok=True)
            await run_in_threadpool(target.write_bytes, content)
        except OSError as e:
            logger.error("Failed to write photo file %s: %s", target, e, exc_info=e)
            raise StorageError("Failed to save file") from e
        logger.debug("Wrote %d bytes to %s", len(content), target)
        return target

    async def delete(self, photo_url: str | None) -> bool:
        """Remove the file behind ``photo_url``. Missing files and OS errors are only logged.

        Paths outside the storage root are never touched.

        Returns:
            True if a file was removed.
        """
        if not photo_url:
            return False
        path = Path(photo_url).resolve()
        if not path.is_relative_to(self.root):
            logger.warning("Skipped deleting photo file outside storage root: %s", photo_url)
            return False
        try:
            if not await run_in_threadpool(path.exists):
                logger.warning("Photo file %s not found in storage", photo_url)
                return False
            await run_in_threadpool(path.unlink)
        except OSError as e:
            logger.error("Failed to delete photo file %s: %s", photo_url, e, exc_info=e)
            return False
        logger.info("Deleted photo file %s", photo_url)
        return True
