"""
Edit-distance based token similarity.

Similarity is ``1 - levenshtein / longest_length`` with two shortcuts: long
tokens containing each other score 0.9, and tokens that only differ by
repeated letters ("caaarne" vs "carne") score 0.98.
"""

import re

COLLAPSED_EQUAL_SCORE = 0.98
CONTAINMENT_SCORE = 0.9
MIN_COLLAPSED_LENGTH = 4
MIN_CONTAINMENT_LENGTH = 6

_REPEATED_CHARS = re.compile(r"([a-z0-9])\1+")


def levenshtein_distance(left: str, right: str) -> int:
    rows = len(left) + 1
    cols = len(right) + 1
    matrix = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            substitution_cost = 0 if left[i - 1] == right[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + substitution_cost,
            )

    return matrix[len(left)][len(right)]


def collapse_repeated_characters(value: str) -> str:
    return _REPEATED_CHARS.sub(r"\1", value)


def raw_token_similarity(left: str, right: str) -> float:
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    if len(left) >= MIN_CONTAINMENT_LENGTH and (right in left or left in right):
        return CONTAINMENT_SCORE
    similarity = 1 - levenshtein_distance(left, right) / max(len(left), len(right))
    return similarity if similarity > 0 else 0.0


def token_similarity(left: str, right: str) -> float:
    collapsed_left = collapse_repeated_characters(left)
    collapsed_right = collapse_repeated_characters(right)

    if len(collapsed_left) >= MIN_COLLAPSED_LENGTH and collapsed_left == collapsed_right:
        return COLLAPSED_EQUAL_SCORE

    return max(
        raw_token_similarity(left, right),
        raw_token_similarity(collapsed_left, right),
        raw_token_similarity(left, collapsed_right),
        raw_token_similarity(collapsed_left, collapsed_right),
    )
