"""API router for conversation webhook ingestion."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from models import get_db
from models.schemas import (
    ConversationWebhookBatch,
    ConversationWebhookMessage,
    IngestionResponse,
    IngestionSummary,
)
from services.conversation_ingestion import ingest_conversation_messages

router = APIRouter()

BATCH_KEYS = ("mensagens", "messages")


def extract_webhook_messages(payload: Dict[str, Any]) -> List[ConversationWebhookMessage]:
    """Accept either a batch (``mensagens``/``messages``) or a single message body."""
    try:
        if any(key in payload for key in BATCH_KEYS):
            messages = ConversationWebhookBatch.model_validate(payload).all_messages()
            if not messages:
                raise HTTPException(
                    status_code=400,
                    detail="Provide at least one message in 'mensagens' or 'messages'",
                )
            return messages
        return [ConversationWebhookMessage.model_validate(payload)]
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc


@router.post("/webhook", response_model=IngestionResponse, status_code=201)
async def conversation_webhook(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
) -> IngestionResponse:
    """
    Store conversation messages and link the products they mention.

    Args:
        payload: A single message or a batch under 'mensagens'/'messages'
        db: Database session

    Returns:
        Number of stored messages and created product citations

    Raises:
        HTTPException: If the batch is empty or a message is malformed
    """
    messages = extract_webhook_messages(payload)
    result = ingest_conversation_messages(db, messages)
    return IngestionResponse(
        data=IngestionSummary(inserted=result.inserted, linked_products=result.linked_products)
    )
