from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Message


class MessageRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, message: Message) -> Message:
        self._session.add(message)
        await self._session.flush()
        return message

    async def save_all(self, messages: Sequence[Message]) -> None:
        self._session.add_all(messages)
        await self._session.flush()

    async def find_conversation(self, user1_id: int, user2_id: int) -> Sequence[Message]:
        """Messages exchanged between two users in either direction, oldest first."""
        result = await self._session.execute(
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == user1_id, Message.receiver_id == user2_id),
                    and_(Message.sender_id == user2_id, Message.receiver_id == user1_id),
                )
            )
            .order_by(Message.timestamp, Message.id)
        )
        return result.scalars().all()

    async def find_unread_by_receiver_and_sender(
        self, receiver_id: int, sender_id: int
    ) -> Sequence[Message]:
        result = await self._session.execute(
            select(Message)
            .where(
                Message.receiver_id == receiver_id,
                Message.sender_id == sender_id,
                Message.is_read.is_(False),
            )
            .order_by(Message.id)
        )
        return result.scalars().all()

    async def count_unread_by_receiver(self, receiver_id: int) -> int:
        result = await self._session.execute(
            select(func.count(Message.id)).where(
                Message.receiver_id == receiver_id, Message.is_read.is_(False)
            )
        )
        return int(result.scalar_one())
