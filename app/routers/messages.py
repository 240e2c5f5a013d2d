# app/routers/messages.py
from fastapi import APIRouter, Depends, status

from app.context import StorefrontContext
from app.core.auth import get_context, require_auth
from app.schemas.message import Conversation, ConversationStart, Message, MessageCreate
from app.schemas.profile import Profile

router = APIRouter(
    prefix="/conversations",
    tags=["Messages"],
    dependencies=[Depends(require_auth)],
)


@router.get("", response_model=list[Conversation])
async def list_conversations(ctx: StorefrontContext = Depends(get_context)):
    return await ctx.messages.list_conversations()


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_conversation(
    payload: ConversationStart,
    ctx: StorefrontContext = Depends(get_context),
) -> dict[str, str]:
    """
    Open (or reuse) the conversation with another user.
    """
    conversation_id = await ctx.messages.get_or_create_conversation(payload.other_user_id)
    return {"conversation_id": conversation_id}


@router.get("/{conversation_id}/messages", response_model=list[Message])
async def get_messages(
    conversation_id: str,
    ctx: StorefrontContext = Depends(get_context),
):
    """
    History of a conversation. The first read subscribes to new messages.
    """
    return await ctx.conversations.open(conversation_id)


@router.post(
    "/{conversation_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: str,
    payload: MessageCreate,
    ctx: StorefrontContext = Depends(get_context),
    profile: Profile = Depends(require_auth),
):
    return await ctx.conversations.send(conversation_id, profile.id, payload.content)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_conversation(
    conversation_id: str,
    ctx: StorefrontContext = Depends(get_context),
):
    """Stop listening for new messages and drop the cached history."""
    await ctx.conversations.close(conversation_id)
    return None
