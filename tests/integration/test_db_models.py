"""Integration tests for database models.

These tests verify:
- Model relationships
- CASCADE delete behavior
- Database constraints (uniqueness, foreign keys, checks)
- Default values
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models import Interest, Message, Photo, User, user_interests


def _unique_email() -> str:
    """Generate a unique email for each test."""
    return f"test_{uuid.uuid4().hex[:8]}@example.com"


async def _count(db_session: AsyncSession, model: type) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


class TestModelRelationships:
    """Test SQLAlchemy model relationships."""

    @pytest.mark.asyncio
    async def test_user_interests_many_to_many(self, db_session: AsyncSession) -> None:
        """Interests are shared between users through the association table."""
        # Arrange
        music = Interest(interest_type="Music")
        first = User(email=_unique_email(), interests=[music, Interest(interest_type="Chess")])
        second = User(email=_unique_email(), interests=[music])
        db_session.add_all([first, second])
        await db_session.commit()

        # Act
        result = await db_session.execute(
            select(Interest).where(Interest.id == music.id).options(selectinload(Interest.users))
        )
        loaded = result.scalar_one()

        # Assert
        assert {u.email for u in loaded.users} == {first.email, second.email}
        assert {i.interest_type for i in first.interests} == {"Music", "Chess"}

    @pytest.mark.asyncio
    async def test_user_photos_relationship(self, db_session: AsyncSession) -> None:
        # Arrange
        user = User(email=_unique_email())
        db_session.add(user)
        await db_session.flush()
        db_session.add_all(
            [
                Photo(user_id=user.id, photo_url="/photos/a.png"),
                Photo(user_id=user.id, photo_url="/photos/b.png", is_main=True),
            ]
        )
        await db_session.commit()

        # Act
        result = await db_session.execute(
            select(User).where(User.id == user.id).options(selectinload(User.photos))
        )
        loaded = result.scalar_one()

        # Assert
        assert {p.photo_url for p in loaded.photos} == {"/photos/a.png", "/photos/b.png"}
        assert [p.photo_url for p in loaded.photos if p.is_main] == ["/photos/b.png"]

    @pytest.mark.asyncio
    async def test_message_sender_and_receiver(self, db_session: AsyncSession) -> None:
        # Arrange
        sender = User(email=_unique_email())
        receiver = User(email=_unique_email())
        db_session.add_all([sender, receiver])
        await db_session.flush()
        message = Message(sender_id=sender.id, receiver_id=receiver.id, content="Hello")
        db_session.add(message)
        await db_session.commit()

        # Act
        result = await db_session.execute(
            select(Message)
            .where(Message.id == message.id)
            .options(selectinload(Message.sender), selectinload(Message.receiver))
        )
        loaded = result.scalar_one()

        # Assert
        assert loaded.sender.email == sender.email
        assert loaded.receiver.email == receiver.email


class TestCascadeDelete:
    """Test CASCADE delete behavior."""

    @pytest.mark.asyncio
    async def test_deleting_user_removes_owned_rows(self, db_session: AsyncSession) -> None:
        """Photos, messages and interest links go with the user; interests stay."""
        # Arrange
        user = User(email=_unique_email(), interests=[Interest(interest_type="Music")])
        other = User(email=_unique_email())
        db_session.add_all([user, other])
        await db_session.flush()
        db_session.add_all(
            [
                Photo(user_id=user.id, photo_url="/photos/a.png"),
                Message(sender_id=user.id, receiver_id=other.id, content="Hi"),
                Message(sender_id=other.id, receiver_id=user.id, content="Hey"),
            ]
        )
        await db_session.commit()
        user_id = user.id
        db_session.expunge_all()

        # Act
        await db_session.execute(delete(User).where(User.id == user_id))
        await db_session.commit()

        # Assert
        assert await _count(db_session, Photo) == 0
        assert await _count(db_session, Message) == 0
        links = await db_session.execute(select(func.count()).select_from(user_interests))
        assert links.scalar_one() == 0
        assert await _count(db_session, Interest) == 1
        assert await _count(db_session, User) == 1


class TestConstraints:
    """Test database constraints."""

    @pytest.mark.asyncio
    async def test_email_is_unique(self, db_session: AsyncSession) -> None:
        email = _unique_email()
        db_session.add(User(email=email))
        await db_session.commit()

        db_session.add(User(email=email))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_interest_type_is_unique(self, db_session: AsyncSession) -> None:
        db_session.add(Interest(interest_type="Music"))
        await db_session.commit()

        db_session.add(Interest(interest_type="Music"))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_message_to_self_is_rejected(self, db_session: AsyncSession) -> None:
        user = User(email=_unique_email())
        db_session.add(user)
        await db_session.flush()

        db_session.add(Message(sender_id=user.id, receiver_id=user.id, content="Me again"))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_photo_requires_existing_user(self, db_session: AsyncSession) -> None:
        db_session.add(Photo(user_id=424242, photo_url="/photos/a.png"))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()


class TestDefaults:
    """Test column defaults."""

    @pytest.mark.asyncio
    async def test_message_defaults(self, db_session: AsyncSession) -> None:
        sender = User(email=_unique_email())
        receiver = User(email=_unique_email())
        db_session.add_all([sender, receiver])
        await db_session.flush()

        message = Message(sender_id=sender.id, receiver_id=receiver.id, content="Hello")
        db_session.add(message)
        await db_session.flush()

        assert message.is_read is False
        assert message.timestamp is not None

    @pytest.mark.asyncio
    async def test_photo_defaults(self, db_session: AsyncSession) -> None:
        user = User(email=_unique_email())
        db_session.add(user)
        await db_session.flush()

        photo = Photo(user_id=user.id, photo_url="/photos/a.png")
        db_session.add(photo)
        await db_session.flush()

        assert photo.is_main is False
        assert photo.upload_date == date.today()
