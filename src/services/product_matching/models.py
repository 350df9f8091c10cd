"""
Data models for product mention detection.

Catalog data enters through ``CatalogProduct`` and is turned into immutable
``CatalogEntry`` objects; detection produces ``Mention`` objects.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


class MentionMethod(str, enum.Enum):
    CODE_EXACT = "code_exact"
    NAME_EXACT = "name_exact"
    NAME_FUZZY = "name_fuzzy"


@dataclass(frozen=True)
class CatalogProduct:
    """A product row as delivered by a catalog provider."""
    id: str
    name: str
    sku_code: Optional[str] = None
    ean_code: Optional[str] = None
    dun_code: Optional[str] = None


@dataclass(frozen=True)
class CatalogEntry:
    """Precomputed matching data for one catalog product."""
    product_id: str
    normalized_name: str
    name_tokens: tuple[str, ...]
    normalized_codes: tuple[str, ...]


@dataclass(frozen=True)
class Mention:
    product_id: str
    method: MentionMethod
    score: float


@dataclass(frozen=True)
class MentionInput:
    """Text of one conversation message plus the company it belongs to."""
    message_text: Optional[str] = None
    response_text: Optional[str] = None
    company_id: Optional[str] = None


class ProductCatalogProvider(Protocol):
    def list_products(self, company_id: str) -> Sequence[CatalogProduct]:
        ...
