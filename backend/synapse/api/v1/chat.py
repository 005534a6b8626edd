"""Chat and conversation API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.database import get_db
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ConversationDetailResponse,
    ConversationResponse,
    MessageResponse,
)
from synapse.services.chat_service import ChatService

router = APIRouter()


def _message_out(m) -> MessageResponse:
    return MessageResponse(
        id=m.id,
        conversation_id=m.conversation_id,
        role=m.role,
        message_type=m.message_type,
        content=m.content,
        metadata=m.metadata_,
        created_at=m.created_at,
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Send a message to the assistant; auto-links or creates a problem."""
    service = ChatService(db)
    result = await service.chat(
        user=current_user,
        message=payload.message,
        problem_id=payload.problem_id,
        conversation_id=payload.conversation_id,
        auto_link=payload.auto_link,
        attached_files=payload.attached_files,
    )
    return ChatResponse(**result)


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    problem_id: int | None = Query(None),
    unlinked: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Conversations of a problem, or the unlinked ones (`unlinked=true`)."""
    service = ChatService(db)
    return await service.list_conversations(current_user, problem_id=problem_id, unlinked=unlinked)


@router.get("/conversations/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get conversation with full message history."""
    service = ChatService(db)
    conv = await service.get_conversation(conversation_id)
    return ConversationDetailResponse(
        id=conv.id,
        problem_id=conv.problem_id,
        title=conv.title,
        messages=[_message_out(m) for m in conv.messages],
        created_at=conv.created_at,
    )


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Messages of a conversation in chronological order."""
    service = ChatService(db)
    return [_message_out(m) for m in await service.list_messages(conversation_id)]


@router.delete("/conversations/{conversation_id}", status_code=204)
async def delete_conversation(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a conversation and its messages."""
    service = ChatService(db)
    await service.delete_conversation(conversation_id, current_user)
