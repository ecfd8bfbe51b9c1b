"""Per-player failure statistics derived from recorded answers."""

from typing import Any, Dict, List, Optional

import pandas as pd

from . import database
from .models import FailureStat


def aggregate_failures(rows: List[Dict[str, Any]]) -> List[FailureStat]:
    """Groups answer rows by (word, level) into failure statistics.

    Words answered only once are left out.
    """
    if not rows:
        return []
    df = pd.DataFrame(rows)
    df["wrong"] = (df["is_correct"].astype(int) == 0).astype(int)
    grouped = (
        df.groupby(["word_id", "level"], sort=False)
        .agg(
            headword=("headword", "first"),
            wrong=("wrong", "sum"),
            attempts=("wrong", "size"),
        )
        .reset_index()
    )
    grouped = grouped[grouped["attempts"] > 1]
    return [
        FailureStat(
            word_id=row["word_id"],
            headword=row["headword"],
            level=row["level"],
            wrong=int(row["wrong"]),
            attempts=int(row["attempts"]),
        )
        for row in grouped.to_dict("records")
    ]


def load_failed_stats(user_id: str) -> List[FailureStat]:
    return aggregate_failures(database.fetch_answers_by_user(user_id))


def stats_for_level(stats: List[FailureStat], level: str) -> Dict[str, FailureStat]:
    """Maps word id to its statistic, keeping only ``level``."""
    return {stat.word_id: stat for stat in stats if stat.level == level}


def most_failed(
    stats: List[FailureStat], limit: Optional[int] = None
) -> List[FailureStat]:
    ranked = sorted(stats, key=lambda s: (s.wrong_rate, s.wrong), reverse=True)
    return ranked[:limit] if limit is not None else ranked
