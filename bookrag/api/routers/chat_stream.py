"""
WebSocket streaming chat endpoint.

Provides real-time token streaming for chat responses using WebSocket.

Routes: WS /ws/conversations/{conversation_id}/chat

Dependencies: bookrag.application.services.chat_service
System role: WebSocket streaming HTTP API
"""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from bookrag.core.exceptions import ConversationNotFound, InvalidQuery
from bookrag.models.api import ChatRequest
from bookrag.models.streaming import ClientEventType, StreamEvent
from bookrag.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


@router.websocket("/ws/conversations/{conversation_id}/chat")
async def websocket_chat(
    websocket: WebSocket,
    conversation_id: UUID,
) -> None:
    """
    WebSocket endpoint for streaming chat responses.

    Client sends:
        {"event": "chat", "data": {"message": "..."}}
        {"event": "ping"}

    Server sends:
        {"type": "content", "text": "..."}
        {"type": "done", "sources": [...], "tokens_used": 123}
        {"type": "error", "message": "..."}
        {"type": "pong"}

    Each chat message gets content events followed by exactly one done or
    error event.

    Args:
        websocket: WebSocket connection
        conversation_id: Conversation UUID from path
    """
    await websocket.accept()
    log_with_context(logger, logging.INFO, "WebSocket connection established", conversation_id=conversation_id)

    chat_service = websocket.app.state.container.chat_service

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                data = json.loads(raw_data)
            except json.JSONDecodeError as e:
                log_exception_with_context(
                    logger, "Failed to parse JSON", e, level=logging.WARNING, conversation_id=conversation_id
                )
                await websocket.send_json(StreamEvent.error("Invalid JSON format").to_dict())
                continue

            event_type = data.get("event") if isinstance(data, dict) else None

            if event_type == ClientEventType.PING.value:
                await websocket.send_json({"type": "pong"})
                continue

            if event_type != ClientEventType.CHAT.value:
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Unknown event type received",
                    conversation_id=conversation_id,
                    event_type=str(event_type),
                )
                await websocket.send_json(StreamEvent.error(f"Unknown event type: {event_type}").to_dict())
                continue

            try:
                request = ChatRequest.model_validate(data.get("data") or {})
            except ValidationError:
                await websocket.send_json(StreamEvent.error("Message is required").to_dict())
                continue

            log_with_context(logger, logging.INFO, "Chat event received", conversation_id=conversation_id)
            try:
                event_count = 0
                async for event in chat_service.stream_reply(conversation_id, request.message):
                    event_count += 1
                    await websocket.send_json(event.to_dict())
                log_with_context(
                    logger,
                    logging.INFO,
                    "Chat stream completed",
                    conversation_id=conversation_id,
                    total_events=event_count,
                )
            except (InvalidQuery, ConversationNotFound) as e:
                await websocket.send_json(StreamEvent.error(e.message).to_dict())

    except WebSocketDisconnect:
        log_with_context(logger, logging.INFO, "WebSocket client disconnected", conversation_id=conversation_id)
