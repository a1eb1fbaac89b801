"""Lexical similarity scoring for insight deduplication."""

import re
from typing import Set

_TOKEN_SPLIT = re.compile(r"\W+")
MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> Set[str]:
    """Lowercased word tokens longer than two characters."""
    return {
        token for token in _TOKEN_SPLIT.split(text.lower())
        if len(token) >= MIN_TOKEN_LENGTH
    }


def similarity(a: str, b: str) -> float:
    """Jaccard overlap of the token sets of ``a`` and ``b`` (0.0 to 1.0)."""
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


class SimilarityScorer:
    """
    Decides whether two insight statements say the same thing.

    Two texts are duplicates when their token overlap is strictly above
    the threshold.
    """

    def __init__(self, threshold: float = 0.8):
        self.threshold = threshold

    def score(self, a: str, b: str) -> float:
        return similarity(a, b)

    def is_duplicate(self, a: str, b: str) -> bool:
        return self.score(a, b) > self.threshold
