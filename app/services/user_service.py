"""User accounts and the interests attached to them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import ConflictError, InvalidInputError, NotFoundError
from app.db.models import Interest, User
from app.db.repositories import InterestRepository, PhotoRepository, UserRepository
from app.schemas.user import UserUpdate, UserView
from app.services.photo_storage import PhotoStorage

logger = logging.getLogger(__name__)


def normalize_interest_names(names: Iterable[str]) -> list[str]:
    """Trim names, drop blanks and exact duplicates, keeping the first-seen order.

    Names that differ only by case are kept apart on purpose; the all-of search
    compares its match count against this list.
    """
    return list(dict.fromkeys(name.strip() for name in names if name and name.strip()))


class UserService:
    def __init__(self, session: AsyncSession, storage: PhotoStorage | None = None) -> None:
        self._users = UserRepository(session)
        self._interests = InterestRepository(session)
        self._photos = PhotoRepository(session)
        self._storage = storage or PhotoStorage(settings.photo_storage_dir)

    async def _get_user(self, user_id: int) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    async def _get_or_create_interest(self, interest_type: str) -> Interest:
        interest = await self._interests.get_by_interest_type_ignore_case(interest_type)
        if interest is None:
            interest = await self._interests.add(Interest(interest_type=interest_type))
            logger.info("Created interest %r", interest_type)
        return interest

    @staticmethod
    def _require_interest_name(interest_type: str | None) -> str:
        if interest_type is None or not interest_type.strip():
            raise InvalidInputError("Interest must not be empty")
        return interest_type.strip()

    @staticmethod
    def _require_interest_names(names: Iterable[str] | None) -> list[str]:
        normalized = normalize_interest_names(names or [])
        if not normalized:
            raise InvalidInputError("At least one interest is required")
        return normalized

    @staticmethod
    def _views(users: Sequence[User]) -> list[UserView]:
        return [UserView.model_validate(user) for user in users]

    @staticmethod
    def _require_email(email: str | None) -> str:
        email = email.strip() if email else ""
        if not email:
            raise InvalidInputError("Email must not be empty")
        return email

    async def create_user(
        self, email: str, name: str | None = None, age: int | None = None
    ) -> UserView:
        """Create a user.

        Raises:
            InvalidInputError: If the email is blank or the age is negative.
            ConflictError: If the email is already registered.
        """
        email = self._require_email(email)
        if age is not None and age < 0:
            raise InvalidInputError("Age must not be negative")
        if await self._users.get_by_email(email) is not None:
            raise ConflictError("Email already registered")

        try:
            user = await self._users.add(User(email=email, name=name, age=age))
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email.
            raise ConflictError("Email already registered") from e

        logger.info("Created user %s", user.id)
        return UserView.model_validate(user)

    async def get_user(self, user_id: int) -> UserView:
        return UserView.model_validate(await self._get_user(user_id))

    async def get_user_by_email(self, email: str) -> UserView:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError(f"User with email {email} not found")
        return UserView.model_validate(user)

    async def list_users(self) -> list[UserView]:
        return self._views(await self._users.list_all())

    async def update_user(self, user_id: int, details: UserUpdate) -> UserView:
        """Apply the fields explicitly set on ``details``; an explicit None clears name or age.

        Raises:
            InvalidInputError: If the email is set to a blank value.
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another user.
        """
        user = await self._get_user(user_id)
        changes = details.model_dump(exclude_unset=True)

        if "email" in changes:
            email = self._require_email(changes["email"])
            if email != user.email:
                if await self._users.get_by_email(email) is not None:
                    raise ConflictError("Email already registered")
                user.email = email
        if "name" in changes:
            user.name = changes["name"]
        if "age" in changes:
            user.age = changes["age"]

        try:
            await self._users.add(user)
        except IntegrityError as e:
            raise ConflictError("Email already registered") from e

        logger.info("Updated user %s: %s", user_id, sorted(changes))
        return UserView.model_validate(user)

    async def delete_user(self, user_id: int) -> None:
        """Delete a user with their messages, photos and interest links.

        Photo files are removed after the rows, on a best-effort basis.
        """
        user = await self._get_user(user_id)
        photo_urls = [photo.photo_url for photo in await self._photos.find_by_user_id(user.id)]

        await self._users.delete(user)
        logger.info("Deleted user %s", user_id)

        for photo_url in photo_urls:
            await self._storage.delete(photo_url)

    async def search_by_interest(self, interest_type: str) -> list[UserView]:
        name = self._require_interest_name(interest_type)
        users = await self._users.find_by_interest_type(name)
        logger.debug("Found %d users with interest %r", len(users), name)
        return self._views(users)

    async def search_by_all_interests(self, interest_types: Iterable[str]) -> list[UserView]:
        names = self._require_interest_names(interest_types)
        users = await self._users.find_by_all_interest_types(names)
        logger.debug("Found %d users with all of %s", len(users), names)
        return self._views(users)

    async def search_by_any_interest(self, interest_types: Iterable[str]) -> list[UserView]:
        names = self._require_interest_names(interest_types)
        users = await self._users.find_by_any_interest_types(names)
        logger.debug("Found %d users with any of %s", len(users), names)
        return self._views(users)

    async def add_interest(self, user_id: int, interest_type: str) -> UserView:
        """Attach an interest to a user, reusing an existing one regardless of case."""
        name = self._require_interest_name(interest_type)
        user = await self._get_user(user_id)
        interest = await self._get_or_create_interest(name)

        if all(existing.id != interest.id for existing in user.interests):
            user.interests.append(interest)
            await self._users.add(user)
            logger.info("Added interest %r to user %s", interest.interest_type, user_id)
        return UserView.model_validate(user)

    async def remove_interest(self, user_id: int, interest_type: str) -> UserView:
        name = self._require_interest_name(interest_type)
        user = await self._get_user(user_id)

        match = next(
            (i for i in user.interests if i.interest_type.lower() == name.lower()),
            None,
        )
        if match is None:
            raise NotFoundError(f"User {user_id} has no interest {name!r}")

        user.interests.remove(match)
        await self._users.add(user)
        logger.info("Removed interest %r from user %s", match.interest_type, user_id)
        return UserView.model_validate(user)

    async def update_interest(self, user_id: int, interest_id: int, interest_type: str) -> UserView:
        """Replace one of the user's interests with another, creating it if needed."""
        name = self._require_interest_name(interest_type)
        user = await self._get_user(user_id)

        current = next((i for i in user.interests if i.id == interest_id), None)
        if current is None:
            raise NotFoundError(f"User {user_id} has no interest with id {interest_id}")

        replacement = await self._get_or_create_interest(name)
        if replacement.id != current.id:
            user.interests.remove(current)
            if all(existing.id != replacement.id for existing in user.interests):
                user.interests.append(replacement)
            await self._users.add(user)
            logger.info(
                "Replaced interest %r with %r for user %s",
                current.interest_type,
                replacement.interest_type,
                user_id,
            )
        return UserView.model_validate(user)


def user_service_factory_provider(
    storage: PhotoStorage | None = None,
) -> Callable[[AsyncSession], UserService]:
    """Return a factory that builds a UserService bound to a session."""
    photo_storage = storage or PhotoStorage(settings.photo_storage_dir)

    def factory(session: AsyncSession) -> UserService:
        return UserService(session, photo_storage)

    return factory
