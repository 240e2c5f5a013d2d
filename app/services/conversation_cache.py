# app/services/conversation_cache.py
import logging
from typing import Any

from app.repositories.message_repo import MessageRepository
from app.schemas.message import Message

logger = logging.getLogger(__name__)


class ConversationCache:
    """
    Read-through message cache for the conversations a user has open.

    Messages pushed over the realtime channel are appended to the cached
    list. Ids already present are skipped, so a push racing a manual
    fetch or our own send does not duplicate entries.
    """

    def __init__(self, repo: MessageRepository):
        self.repo = repo
        self._messages: dict[str, list[Message]] = {}
        self._channels: dict[str, Any] = {}

    def is_open(self, conversation_id: str) -> bool:
        return conversation_id in self._channels

    async def open(self, conversation_id: str) -> list[Message]:
        """Subscribe to pushes and return the (cached) history."""
        if conversation_id not in self._channels:
            self._channels[conversation_id] = await self.repo.subscribe(
                conversation_id, self._on_push
            )
        return await self.get_messages(conversation_id)

    async def close(self, conversation_id: str) -> None:
        channel = self._channels.pop(conversation_id, None)
        self._messages.pop(conversation_id, None)
        if channel is not None:
            await self.repo.unsubscribe(channel)

    async def close_all(self) -> None:
        for conversation_id in list(self._channels):
            await self.close(conversation_id)

    async def get_messages(self, conversation_id: str) -> list[Message]:
        cached = self._messages.get(conversation_id)
        if cached is None:
            cached = await self.repo.get_messages(conversation_id)
            self._messages[conversation_id] = cached
        return list(cached)

    async def send(self, conversation_id: str, sender_id: str, content: str) -> Message:
        message = await self.repo.send_message(conversation_id, sender_id, content)
        self._append(message)
        return message

    def invalidate(self, conversation_id: str) -> None:
        self._messages.pop(conversation_id, None)

    def _on_push(self, message: Message) -> None:
        self._append(message)

    def _append(self, message: Message) -> None:
        cached = self._messages.get(message.conversation_id)
        if cached is None:
            return
        if any(m.id == message.id for m in cached):
            return
        cached.append(message)
