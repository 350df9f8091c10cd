"""API router for previewing product mention detection."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config import settings
from models import get_db
from models.schemas import MentionDetectRequest, MentionDetectResponse, MentionItem
from services.catalog_provider import SqlProductCatalogProvider
from services.product_matching import (
    CatalogIndex,
    MatchingThresholds,
    detect_mentioned_products,
    format_source_tag,
)

router = APIRouter()


@router.post("/detect", response_model=MentionDetectResponse)
async def detect_mentions(
    request: MentionDetectRequest,
    db: Session = Depends(get_db),
) -> MentionDetectResponse:
    """Run mention detection for one message without storing anything."""
    thresholds = MatchingThresholds.from_settings(settings)
    catalog_index = CatalogIndex(SqlProductCatalogProvider(db), thresholds)
    mentions = detect_mentioned_products(
        request.message_text,
        request.response_text,
        request.company_id,
        catalog_index,
        thresholds,
    )
    prefix = request.source_prefix or settings.default_source_prefix
    return MentionDetectResponse(
        mentions=[
            MentionItem(
                product_id=m.product_id,
                method=m.method.value,
                score=round(m.score, 4),
                source=format_source_tag(prefix, m.method, m.score),
            )
            for m in mentions
        ]
    )
