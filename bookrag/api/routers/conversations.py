"""
Conversation API endpoints.

Routes:
- POST /conversations - Open a conversation
- GET /conversations/{id}/messages - Conversation history
- POST /conversations/{id}/archive - Archive (soft delete) a conversation

Dependencies: bookrag.application.services.chat_service, bookrag.models
System role: Conversation management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from bookrag.api.deps import get_chat_service
from bookrag.application.services import ChatService
from bookrag.core.exceptions import ConversationNotFound
from bookrag.models.api import (
    ConversationResponse,
    CreateConversationRequest,
    MessageHistoryResponse,
    MessageResponse,
)
from bookrag.models.conversation import Conversation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _to_response(conversation: Conversation) -> ConversationResponse:
    return ConversationResponse(
        id=conversation.id,
        user_id=conversation.user_id,
        book_id=conversation.book_id,
        title=conversation.title,
        conversation_type=conversation.conversation_type,
        status=conversation.status,
        total_tokens_used=conversation.total_tokens_used,
        message_count=conversation.message_count,
    )


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ConversationResponse:
    """Open a new conversation, optionally scoped to one book."""
    conversation = await chat_service.create_conversation(
        user_id=request.user_id,
        book_id=request.book_id,
        title=request.title,
    )
    return _to_response(conversation)


@router.get("/{conversation_id}/messages", response_model=MessageHistoryResponse)
async def get_messages(
    conversation_id: UUID,
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageHistoryResponse:
    """
    Get conversation history in chronological order.

    Raises:
        HTTPException(404): Conversation not found
    """
    try:
        messages = await chat_service.get_messages(conversation_id)
    except ConversationNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    return MessageHistoryResponse(
        messages=[
            MessageResponse(
                role=message.role,
                content=message.content,
                status=message.status,
                sources=message.sources,
                tokens_used=message.tokens_used,
            )
            for message in messages
        ],
        total=len(messages),
    )


@router.post("/{conversation_id}/archive", response_model=ConversationResponse)
async def archive_conversation(
    conversation_id: UUID,
    chat_service: ChatService = Depends(get_chat_service),
) -> ConversationResponse:
    """
    Archive a conversation; it stops accepting messages.

    Raises:
        HTTPException(404): Conversation not found
    """
    try:
        conversation = await chat_service.archive_conversation(conversation_id)
    except ConversationNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _to_response(conversation)
