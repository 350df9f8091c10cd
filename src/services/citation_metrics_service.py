from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from models import ConversationProductCitation, Product

Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class ProductCitationCount:
    product_id: str
    product_name: str
    citations: int


def product_citation_ranking(
    db: Session,
    company_id: Optional[str],
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    limit: int = 5,
    direction: Direction = "desc",
) -> list[ProductCitationCount]:
    citations = func.count(ConversationProductCitation.id).label("citations")
    query = (
        db.query(Product.id, Product.name, citations)
        .join(ConversationProductCitation, ConversationProductCitation.product_id == Product.id)
        .filter(*_citation_filters(company_id, start_at, end_at))
        .group_by(Product.id, Product.name)
    )
    order = citations.desc() if direction == "desc" else citations.asc()
    rows = query.order_by(order, Product.name.asc()).limit(limit).all()
    return [ProductCitationCount(product_id=pid, product_name=name, citations=int(count)) for pid, name, count in rows]


def most_and_least_cited(
    db: Session,
    company_id: Optional[str],
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    limit: int = 5,
) -> tuple[list[ProductCitationCount], list[ProductCitationCount]]:
    most = product_citation_ranking(db, company_id, start_at, end_at, limit, "desc")
    least = product_citation_ranking(db, company_id, start_at, end_at, limit, "asc")
    return most, least


def _citation_filters(company_id: Optional[str], start_at: Optional[datetime], end_at: Optional[datetime]) -> list:
    filters = [Product.deleted_at.is_(None)]
    if start_at:
        filters.append(ConversationProductCitation.cited_at >= start_at)
    if end_at:
        filters.append(ConversationProductCitation.cited_at <= end_at)
    if company_id:
        filters.append(or_(
            ConversationProductCitation.company_id == company_id,
            and_(ConversationProductCitation.company_id.is_(None), Product.company_id == company_id),
        ))
    return filters
