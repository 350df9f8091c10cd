MIN_TOKEN_LENGTH = 3

STOPWORDS = frozenset({
    "de", "da", "do", "das", "dos",
    "e", "em", "para", "com", "sem", "por",
    "na", "no", "nas", "nos",
    "uma", "um",
    "tipo", "linha",
})


def extract_meaningful_tokens(normalized_text: str) -> list[str]:
    """Split normalized text into tokens, dropping short words and stopwords.

    Order and duplicates are preserved.
    """
    if not normalized_text:
        return []
    tokens = (piece.strip() for piece in normalized_text.split(" "))
    return [t for t in tokens if len(t) >= MIN_TOKEN_LENGTH and t not in STOPWORDS]
