"""
Product mention detection.

Each catalog product is tested against the message in three tiers, stopping at
the first hit:

1. code_exact: a normalized SKU/EAN/DUN code appears in the alphanumeric text.
2. name_exact: the normalized product name appears in the normalized text.
3. name_fuzzy: product name tokens are matched against message tokens by edit
   distance, and the combined score clears ``min_fuzzy_score``.

Mentions are ranked by score (ties keep catalog order) and capped per message.
"""

import logging
from typing import Callable, Dict, Optional, Sequence

from services.product_matching.catalog_index import CatalogIndex
from services.product_matching.config import DEFAULT_THRESHOLDS, MatchingThresholds
from services.product_matching.edit_distance import token_similarity
from services.product_matching.models import CatalogEntry, Mention, MentionInput, MentionMethod
from services.product_matching.normalization import normalize_alphanumeric, normalize_for_matching
from services.product_matching.tokenizer import extract_meaningful_tokens

logger = logging.getLogger(__name__)

Similarity = Callable[[str, str], float]


def format_source_tag(prefix: str, method: MentionMethod, score: float) -> str:
    """Audit tag stored on citation links, e.g. ``auto_text_v1:name_fuzzy:0.91``."""
    return f"{prefix}:{MentionMethod(method).value}:{score:.2f}"


def has_exact_code_match(text_alphanumeric: str, normalized_codes: Sequence[str]) -> bool:
    if not text_alphanumeric or not normalized_codes:
        return False
    return any(code in text_alphanumeric for code in normalized_codes)


def compute_fuzzy_product_score(
    product_tokens: Sequence[str],
    text_tokens: Sequence[str],
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
    similarity: Similarity = token_similarity,
) -> Optional[float]:
    """Score how well the product name tokens are covered by the message tokens.

    Returns None when too few product tokens find a close counterpart or the
    average similarity is too low.
    """
    if len(product_tokens) < thresholds.min_fuzzy_product_tokens or not text_tokens:
        return None

    matched_count = 0
    token_score_sum = 0.0
    for product_token in product_tokens:
        best_score = 0.0
        for text_token in text_tokens:
            best_score = max(best_score, similarity(product_token, text_token))
            if best_score >= 1:
                break
        token_score_sum += best_score
        if best_score >= thresholds.min_token_similarity:
            matched_count += 1

    match_ratio = matched_count / len(product_tokens)
    average_similarity = token_score_sum / len(product_tokens)
    if match_ratio < thresholds.min_fuzzy_match_ratio or average_similarity < thresholds.min_fuzzy_average_similarity:
        return None

    return average_similarity * thresholds.fuzzy_similarity_weight + match_ratio * thresholds.fuzzy_ratio_weight


def _memoized_similarity() -> Similarity:
    cache: Dict[tuple[str, str], float] = {}

    def similarity(left: str, right: str) -> float:
        key = (left, right)
        if key not in cache:
            cache[key] = token_similarity(left, right)
        return cache[key]

    return similarity


class MentionDetector:
    def __init__(self, catalog_index: CatalogIndex, thresholds: Optional[MatchingThresholds] = None):
        self.catalog_index = catalog_index
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def detect(self, mention_input: MentionInput) -> list[Mention]:
        if not mention_input.company_id:
            return []

        full_text = "\n".join(t for t in (mention_input.message_text, mention_input.response_text) if t)
        normalized_text = normalize_for_matching(full_text)
        if not normalized_text:
            return []

        text_alphanumeric = normalize_alphanumeric(full_text)
        text_tokens = extract_meaningful_tokens(normalized_text)
        if not text_tokens and not text_alphanumeric:
            return []

        entries = self.catalog_index.get_entries(mention_input.company_id)
        similarity = _memoized_similarity()
        mentions = []
        for entry in entries:
            mention = self._match_entry(entry, normalized_text, text_alphanumeric, text_tokens, similarity)
            if mention:
                logger.debug(f"Product {mention.product_id} matched via {mention.method.value} ({mention.score:.2f})")
                mentions.append(mention)

        mentions.sort(key=lambda m: m.score, reverse=True)
        return mentions[: self.thresholds.max_mentions_per_message]

    def _match_entry(
        self,
        entry: CatalogEntry,
        normalized_text: str,
        text_alphanumeric: str,
        text_tokens: Sequence[str],
        similarity: Similarity,
    ) -> Optional[Mention]:
        if has_exact_code_match(text_alphanumeric, entry.normalized_codes):
            return Mention(entry.product_id, MentionMethod.CODE_EXACT, 1.0)

        name = entry.normalized_name
        if len(name) >= self.thresholds.min_name_length and name in normalized_text:
            return Mention(entry.product_id, MentionMethod.NAME_EXACT, self.thresholds.name_exact_score)

        fuzzy_score = compute_fuzzy_product_score(entry.name_tokens, text_tokens, self.thresholds, similarity)
        if fuzzy_score is None or fuzzy_score < self.thresholds.min_fuzzy_score:
            return None
        return Mention(entry.product_id, MentionMethod.NAME_FUZZY, fuzzy_score)


def detect_mentioned_products(
    message_text: Optional[str],
    response_text: Optional[str],
    company_id: Optional[str],
    catalog_index: CatalogIndex,
    thresholds: Optional[MatchingThresholds] = None,
) -> list[Mention]:
    detector = MentionDetector(catalog_index, thresholds)
    return detector.detect(MentionInput(message_text, response_text, company_id))
