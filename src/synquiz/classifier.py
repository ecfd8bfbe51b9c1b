"""Coarse morphological buckets used to pick plausible distractors.

This is a suffix heuristic, not a morphological analyzer: words that share a
bucket merely look alike, which is enough to make wrong options less obvious.
"""

from enum import Enum
from typing import Tuple


class WordType(str, Enum):
    VERB = "verb"
    PLURAL = "plural"
    ABSTRACT = "abstract"
    OTHER = "other"


# Checked in order; the first matching bucket wins.
SUFFIX_RULES: Tuple[Tuple[WordType, Tuple[str, ...]], ...] = (
    (WordType.VERB, ("tu", "du", "ten", "tzen")),
    (WordType.PLURAL, ("ak", "ek")),
    (WordType.ABSTRACT, ("era", "ura", "tasun")),
)


def classify(word: str) -> WordType:
    normalized = word.strip().lower()
    for word_type, suffixes in SUFFIX_RULES:
        if normalized.endswith(suffixes):
            return word_type
    return WordType.OTHER
