"""
Product mention detection for conversation messages.

Finds which catalog products a chat message talks about using product codes,
exact product names, and edit-distance token matching.
"""

from services.product_matching.catalog_index import CatalogIndex, build_catalog_entry
from services.product_matching.config import DEFAULT_THRESHOLDS, MatchingThresholds
from services.product_matching.detector import (
    MentionDetector,
    compute_fuzzy_product_score,
    detect_mentioned_products,
    format_source_tag,
)
from services.product_matching.edit_distance import (
    collapse_repeated_characters,
    levenshtein_distance,
    raw_token_similarity,
    token_similarity,
)
from services.product_matching.models import (
    CatalogEntry,
    CatalogProduct,
    Mention,
    MentionInput,
    MentionMethod,
    ProductCatalogProvider,
)
from services.product_matching.normalization import normalize_alphanumeric, normalize_for_matching
from services.product_matching.tokenizer import STOPWORDS, extract_meaningful_tokens

__all__ = [
    "CatalogEntry",
    "CatalogIndex",
    "CatalogProduct",
    "DEFAULT_THRESHOLDS",
    "MatchingThresholds",
    "Mention",
    "MentionDetector",
    "MentionInput",
    "MentionMethod",
    "ProductCatalogProvider",
    "STOPWORDS",
    "build_catalog_entry",
    "collapse_repeated_characters",
    "compute_fuzzy_product_score",
    "detect_mentioned_products",
    "extract_meaningful_tokens",
    "format_source_tag",
    "levenshtein_distance",
    "normalize_alphanumeric",
    "normalize_for_matching",
    "raw_token_similarity",
    "token_similarity",
]
