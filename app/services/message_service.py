"""Direct messaging between users."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInputError, NotFoundError
from app.db.models import Message, User
from app.db.repositories import MessageRepository, UserRepository
from app.schemas.message import MessageView

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"
INTERLOCUTOR_NOT_FOUND_MESSAGE = "Interlocutor not found"


class MessageService:
    """Sends messages and tracks their read state.

    A message is created unread and can only move to read; it is never deleted here.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)
        self._messages = MessageRepository(session)

    async def _get_user(
        self, user_id: int, not_found_message: str = USER_NOT_FOUND_MESSAGE
    ) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            logger.error("User not found: id=%s", user_id)
            raise NotFoundError(not_found_message)
        return user

    async def send_message(
        self, sender_id: int, receiver_id: int, content: str | None
    ) -> MessageView:
        """Send a message from one user to another.

        Raises:
            InvalidInputError: If content is blank or the sender is the receiver.
            NotFoundError: If either user does not exist.
        """
        logger.info("Sending message from %s to %s", sender_id, receiver_id)

        if content is None or not content.strip():
            logger.warning("Rejected message with empty content from %s", sender_id)
            raise InvalidInputError("Message content must not be empty")

        sender = await self._get_user(sender_id)
        receiver = await self._get_user(receiver_id, INTERLOCUTOR_NOT_FOUND_MESSAGE)

        if sender.id == receiver.id:
            logger.warning("Rejected message to self from %s", sender_id)
            raise InvalidInputError("Cannot send a message to yourself")

        message = await self._messages.add(
            Message(sender_id=sender.id, receiver_id=receiver.id, content=content)
        )
        logger.info(
            "Message %s sent from %s to %s at %s",
            message.id,
            sender_id,
            receiver_id,
            message.timestamp.isoformat(timespec="seconds"),
        )
        return MessageView.model_validate(message)

    async def get_conversation(self, user1_id: int, user2_id: int) -> list[MessageView]:
        """Return every message exchanged between two users, oldest first."""
        logger.info("Loading conversation between %s and %s", user1_id, user2_id)
        user1 = await self._get_user(user1_id)
        user2 = await self._get_user(user2_id)

        messages = await self._messages.find_conversation(user1.id, user2.id)
        logger.debug("Found %d messages between %s and %s", len(messages), user1_id, user2_id)
        return [MessageView.model_validate(message) for message in messages]

    async def mark_messages_as_read(self, user_id: int, interlocutor_id: int) -> int:
        """Mark all unread messages sent to ``user_id`` by ``interlocutor_id`` as read.

        Returns:
            The number of messages that changed state.
        """
        logger.info("User %s marks messages from %s as read", user_id, interlocutor_id)
        user = await self._get_user(user_id)
        interlocutor = await self._get_user(interlocutor_id, INTERLOCUTOR_NOT_FOUND_MESSAGE)

        unread = await self._messages.find_unread_by_receiver_and_sender(user.id, interlocutor.id)
        for message in unread:
            message.is_read = True
        await self._messages.save_all(unread)

        logger.info("Marked %d messages from %s as read", len(unread), interlocutor_id)
        return len(unread)

    async def get_unread_messages_count(self, user_id: int) -> int:
        user = await self._get_user(user_id)
        count = await self._messages.count_unread_by_receiver(user.id)
        logger.debug("User %s has %d unread messages", user_id, count)
        return count


def message_service_factory_provider() -> Callable[[AsyncSession], MessageService]:
    """Return a factory that builds a MessageService bound to a session."""
    return MessageService
