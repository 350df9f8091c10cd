"""
Conversation webhook ingestion.

Stores incoming chat messages and links each one to the catalog products it
mentions. A fresh ``CatalogIndex`` is created for every batch so each company
catalog is read once per batch and never reused across requests.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models import ConversationMessage
from models.schemas import ConversationWebhookMessage
from services.catalog_provider import SqlProductCatalogProvider
from services.citation_links import CitationLinkWriter, link_mentioned_products
from services.product_matching import CatalogIndex, MatchingThresholds, MentionDetector, MentionInput

logger = logging.getLogger(__name__)

BRAZIL_DDI = "55"
BRAZIL_LOCAL_LENGTHS_WITH_DDD = {10, 11}


@dataclass(frozen=True)
class NormalizedConversationMessage:
    timestamp_iso: Optional[datetime]
    sender_id: Optional[str]
    message_date: Optional[datetime]
    msg_type: Optional[str]
    flow_name: Optional[str]
    execution_id: Optional[str]
    message_id: Optional[str]
    message_text: Optional[str]
    response_text: Optional[str]
    seller_name: Optional[str]
    seller_phone: Optional[str]
    supervisor: Optional[str]
    client_name: Optional[str]
    leads_found: Optional[str]
    company_id: Optional[str]
    source: Optional[str]


@dataclass
class IngestionResult:
    inserted: int = 0
    linked_products: int = 0


def clean_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    trimmed = value.strip()
    return trimmed or None


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    cleaned = clean_text(value)
    if not cleaned:
        return None
    try:
        parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        return None
    # SQLite drops the offset on write, so aware values are stored as UTC.
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return parsed


def normalize_phone(phone: Optional[str]) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if not digits or digits.startswith(BRAZIL_DDI):
        return digits
    if len(digits) in BRAZIL_LOCAL_LENGTHS_WITH_DDD:
        return f"{BRAZIL_DDI}{digits}"
    return digits


def normalize_webhook_message(message: ConversationWebhookMessage) -> NormalizedConversationMessage:
    return NormalizedConversationMessage(
        timestamp_iso=parse_datetime(message.timestamp_iso),
        sender_id=clean_text(message.sender_id),
        message_date=parse_datetime(message.data),
        msg_type=clean_text(message.msg_type),
        flow_name=clean_text(message.flow_name),
        execution_id=clean_text(message.execution_id),
        message_id=clean_text(message.message_id),
        message_text=clean_text(message.mensagem),
        response_text=clean_text(message.resposta),
        seller_name=clean_text(message.vendedor_nome),
        seller_phone=normalize_phone(message.vendedor_telefone) or None,
        supervisor=clean_text(message.supervisor),
        client_name=clean_text(message.cliente_nome),
        leads_found=clean_text(message.leads_encontrados),
        company_id=clean_text(message.company_id),
        source=clean_text(message.source),
    )


def ingest_conversation_messages(
    db: Session,
    messages: Iterable[ConversationWebhookMessage],
    thresholds: Optional[MatchingThresholds] = None,
) -> IngestionResult:
    thresholds = thresholds or MatchingThresholds.from_settings(settings)
    catalog_index = CatalogIndex(SqlProductCatalogProvider(db), thresholds)
    detector = MentionDetector(catalog_index, thresholds)
    writer = CitationLinkWriter(db)

    result = IngestionResult()
    for message in messages:
        result.linked_products += _ingest_message(db, normalize_webhook_message(message), detector, writer)
        result.inserted += 1

    logger.info(f"Ingested {result.inserted} conversation messages, linked {result.linked_products} products")
    return result


def _ingest_message(
    db: Session,
    message: NormalizedConversationMessage,
    detector: MentionDetector,
    writer: CitationLinkWriter,
) -> int:
    record = _store_message(db, message)
    mentions = detector.detect(MentionInput(message.message_text, message.response_text, message.company_id))
    if not mentions:
        return 0

    cited_at = record.timestamp_iso or record.created_at or datetime.now(timezone.utc)
    source_prefix = message.source or settings.default_source_prefix
    try:
        linked = link_mentioned_products(writer, record.id, mentions, message.company_id, cited_at, source_prefix)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(f"Failed to link {len(mentions)} products to conversation message {record.id}", exc_info=True)
        return 0
    return linked


def _store_message(db: Session, message: NormalizedConversationMessage) -> ConversationMessage:
    record = ConversationMessage(
        company_id=message.company_id,
        timestamp_iso=message.timestamp_iso,
        sender_id=message.sender_id,
        message_date=message.message_date,
        msg_type=message.msg_type,
        flow_name=message.flow_name,
        execution_id=message.execution_id,
        message_id=message.message_id,
        message_text=message.message_text,
        response_text=message.response_text,
        seller_name=message.seller_name,
        seller_phone=message.seller_phone,
        supervisor=message.supervisor,
        client_name=message.client_name,
        leads_found=message.leads_found,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
