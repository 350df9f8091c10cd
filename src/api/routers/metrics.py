"""API router for product citation metrics."""

from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from config import settings
from models import get_db
from models.schemas import ProductCitationItem, ProductCitationRankingResponse
from services.citation_metrics_service import most_and_least_cited

router = APIRouter()


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        detail = "start_date must be on or before end_date"
        raise HTTPException(status_code=400, detail=detail)


@router.get("/products/citations", response_model=ProductCitationRankingResponse)
async def get_product_citation_ranking(
    company_id: Optional[str] = Query(None, description="Company ID"),
    start_date: Optional[date] = Query(None, description="First day (inclusive)"),
    end_date: Optional[date] = Query(None, description="Last day (inclusive)"),
    limit: int = Query(settings.ranking_default_limit, ge=1, le=settings.ranking_max_limit),
    db: Session = Depends(get_db),
) -> ProductCitationRankingResponse:
    """
    Get the most and least cited products in a period.

    Args:
        company_id: Restrict to one company's citations
        start_date: Start of the period
        end_date: End of the period
        limit: Maximum number of products per list
        db: Database session

    Returns:
        Most and least cited products with their citation counts

    Raises:
        HTTPException: If start_date is after end_date
    """
    validate_date_range(start_date, end_date)
    start_at = datetime.combine(start_date, time.min) if start_date else None
    end_at = datetime.combine(end_date, time.max) if end_date else None

    most, least = most_and_least_cited(db, company_id, start_at, end_at, limit)
    return ProductCitationRankingResponse(
        company_id=company_id,
        most_cited=[ProductCitationItem(**vars(item)) for item in most],
        least_cited=[ProductCitationItem(**vars(item)) for item in least],
    )
