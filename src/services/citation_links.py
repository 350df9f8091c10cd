"""
Persistence of detected product mentions as citation links.

Links are written one by one. A duplicate (message, product) pair is skipped
rather than raised, so retried webhook deliveries are harmless; any other
integrity error (an unknown product, for instance) is raised. Links of one
message are not written atomically: each insert runs in its own savepoint and
the caller decides whether to commit or drop the ones already written when a
later insert fails.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import ConversationProductCitation
from services.product_matching import Mention, format_source_tag

logger = logging.getLogger(__name__)


class CitationLinkWriter:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        message_id: str,
        product_id: str,
        company_id: Optional[str],
        cited_at: datetime,
        source: str,
    ) -> int:
        """Insert one citation link. Returns 1 when written, 0 when it already existed."""
        if self._exists(message_id, product_id):
            return 0
        try:
            with self.db.begin_nested():
                self.db.add(ConversationProductCitation(
                    conversation_message_id=message_id,
                    product_id=product_id,
                    company_id=company_id,
                    cited_at=cited_at,
                    source=source,
                ))
        except IntegrityError:
            if not self._exists(message_id, product_id):
                raise
            logger.debug(f"Citation for message {message_id} and product {product_id} already exists")
            return 0
        return 1

    def _exists(self, message_id: str, product_id: str) -> bool:
        return (
            self.db.query(ConversationProductCitation.id)
            .filter(
                ConversationProductCitation.conversation_message_id == message_id,
                ConversationProductCitation.product_id == product_id,
            )
            .first()
            is not None
        )


def link_mentioned_products(
    writer: CitationLinkWriter,
    message_id: str,
    mentions: Sequence[Mention],
    company_id: Optional[str],
    cited_at: datetime,
    source_prefix: str,
) -> int:
    inserted = 0
    for mention in mentions:
        source = format_source_tag(source_prefix, mention.method, mention.score)
        inserted += writer.create(message_id, mention.product_id, company_id, cited_at, source)
    return inserted
