"""
Thresholds for product mention detection.

The defaults were tuned empirically against vendor chat transcripts. Every
value can be overridden through ``MATCHING_*`` environment settings.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingThresholds:
    max_mentions_per_message: int = 5
    min_token_similarity: float = 0.75
    min_fuzzy_match_ratio: float = 0.7
    min_fuzzy_average_similarity: float = 0.78
    min_fuzzy_score: float = 0.84
    min_code_length: int = 4
    min_name_length: int = 4
    name_exact_score: float = 0.97
    fuzzy_similarity_weight: float = 0.6
    fuzzy_ratio_weight: float = 0.4
    min_fuzzy_product_tokens: int = 2

    @classmethod
    def from_settings(cls, settings) -> "MatchingThresholds":
        return cls(
            max_mentions_per_message=settings.matching_max_mentions_per_message,
            min_token_similarity=settings.matching_min_token_similarity,
            min_fuzzy_match_ratio=settings.matching_min_fuzzy_match_ratio,
            min_fuzzy_average_similarity=settings.matching_min_fuzzy_average_similarity,
            min_fuzzy_score=settings.matching_min_fuzzy_score,
            min_code_length=settings.matching_min_code_length,
            min_name_length=settings.matching_min_name_length,
        )


DEFAULT_THRESHOLDS = MatchingThresholds()
