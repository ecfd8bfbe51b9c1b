"""Synonym quiz: question pool generation, scoring and the game API."""

from .classifier import WordType, classify
from .generator import PoolGenerator, generate_pool
from .models import FailureStat, QuestionItem, WordEntry
from .scoring import compute_bonus, compute_points

__all__ = [
    "FailureStat",
    "PoolGenerator",
    "QuestionItem",
    "WordEntry",
    "WordType",
    "classify",
    "compute_bonus",
    "compute_points",
    "generate_pool",
]
