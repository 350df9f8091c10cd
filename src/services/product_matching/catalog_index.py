"""
Per-company catalog cache for product matching.

A ``CatalogIndex`` is owned by its caller and lives for one ingestion batch or
request. It must be discarded afterwards so catalog edits are picked up by the
next batch. Entries are immutable once built and can be shared between
threads; building is serialized by a lock so each company is fetched at most
once per index.
"""

import logging
import threading
from typing import Dict, Optional

from services.product_matching.config import DEFAULT_THRESHOLDS, MatchingThresholds
from services.product_matching.models import CatalogEntry, CatalogProduct, ProductCatalogProvider
from services.product_matching.normalization import normalize_alphanumeric, normalize_for_matching
from services.product_matching.tokenizer import extract_meaningful_tokens

logger = logging.getLogger(__name__)


def build_catalog_entry(
    product: CatalogProduct,
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
) -> CatalogEntry:
    normalized_name = normalize_for_matching(product.name)
    codes = (normalize_alphanumeric(code) for code in (product.sku_code, product.ean_code, product.dun_code))
    return CatalogEntry(
        product_id=product.id,
        normalized_name=normalized_name,
        name_tokens=tuple(extract_meaningful_tokens(normalized_name)),
        normalized_codes=tuple(code for code in codes if len(code) >= thresholds.min_code_length),
    )


class CatalogIndex:
    def __init__(
        self,
        provider: ProductCatalogProvider,
        thresholds: Optional[MatchingThresholds] = None,
    ):
        self._provider = provider
        self._thresholds = thresholds or DEFAULT_THRESHOLDS
        self._entries: Dict[str, tuple[CatalogEntry, ...]] = {}
        self._lock = threading.Lock()

    def __contains__(self, company_id: str) -> bool:
        return company_id in self._entries

    def get_entries(self, company_id: str) -> tuple[CatalogEntry, ...]:
        cached = self._entries.get(company_id)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._entries.get(company_id)
            if cached is None:
                cached = self._build(company_id)
                self._entries[company_id] = cached
        return cached

    def _build(self, company_id: str) -> tuple[CatalogEntry, ...]:
        try:
            products = self._provider.list_products(company_id)
        except Exception:
            logger.exception(f"Failed to load product catalog for company {company_id}")
            raise
        entries = tuple(build_catalog_entry(p, self._thresholds) for p in products)
        logger.debug(f"Built catalog index for company {company_id}: {len(entries)} products")
        return entries
