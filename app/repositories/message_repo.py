# app/repositories/message_repo.py
import logging
from typing import Any, Callable

from app.repositories.base import SupabaseRepository
from app.schemas.message import Conversation, Message

logger = logging.getLogger(__name__)


def _record_from_payload(payload: dict[str, Any]) -> dict[str, Any] | None:
    """
    Pull the inserted row out of a realtime postgres_changes payload.
    The row sits under data.record (newer clients) or new (older ones).
    """
    data = payload.get("data") or {}
    return data.get("record") or payload.get("new")


class MessageRepository(SupabaseRepository):
    """
    Data access for conversations and messages, plus the realtime
    subscription used to push new messages into open conversations.
    """

    async def list_conversations(self) -> list[Conversation]:
        """
        Overview of the current user's conversations.
        Backed by the conversation_overview view (scoped by RLS).
        """
        data = await self._execute(
            self.client.table("conversation_overview")
            .select("*")
            .order("last_message_at", desc=True),
            "list_conversations",
        )
        return [Conversation.model_validate(c) for c in data or []]

    async def get_or_create_conversation(self, other_user_id: str) -> str:
        """
        Idempotent: calling twice with the same counterpart returns the same id.
        """
        data = await self._execute(
            self.client.rpc("get_or_create_conversation", {"other_user_id": other_user_id}),
            "get_or_create_conversation",
        )
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = data.get("conversation_id") or data.get("id")
        return str(data)

    async def get_messages(self, conversation_id: str) -> list[Message]:
        data = await self._execute(
            self.client.table("messages")
            .select("*")
            .eq("conversation_id", conversation_id)
            .order("created_at"),
            "get_messages",
        )
        return [Message.model_validate(m) for m in data or []]

    async def send_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
        data = await self._execute(
            self.client.table("messages").insert(
                {
                    "conversation_id": conversation_id,
                    "sender_id": sender_id,
                    "content": content,
                }
            ),
            "send_message",
        )
        return Message.model_validate(data[0])

    # ----- Realtime -----

    async def subscribe(
        self, conversation_id: str, on_message: Callable[[Message], None]
    ) -> Any:
        """
        Subscribe to message inserts for one conversation.

        Returns the channel; pass it to unsubscribe() when done.
        """

        def _handle(payload: dict[str, Any]) -> None:
            record = _record_from_payload(payload)
            if not record:
                logger.warning("Ignoring realtime payload without record: %s", payload)
                return
            on_message(Message.model_validate(record))

        channel = self.client.channel(f"conversation-{conversation_id}")
        channel.on_postgres_changes(
            "INSERT",
            schema="public",
            table="messages",
            filter=f"conversation_id=eq.{conversation_id}",
            callback=_handle,
        )
        await channel.subscribe()
        return channel

    async def unsubscribe(self, channel: Any) -> None:
        await self.client.remove_channel(channel)
