# app/schemas/message.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class Conversation(SQLModel):
    """
    Row shape returned by the conversations overview query.
    """

    model_config = ConfigDict(extra="ignore")

    conversation_id: str
    other_user_id: str
    other_user_name: str = ""
    last_message: str | None = None
    last_message_at: str | None = None
    unread_count: int = 0


class Message(SQLModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: str
    is_read: bool = False


class MessageCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(max_length=5000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty")
        return v


class ConversationStart(SQLModel):
    model_config = ConfigDict(extra="forbid")

    other_user_id: str
