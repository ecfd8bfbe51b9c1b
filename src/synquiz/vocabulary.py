import glob
import logging
import os
from typing import Any, Dict, List

import pandas as pd

from .models import WordEntry, normalize_synonyms

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("headword", "synonyms")

DUMMY_WORDS = [
    {"id": "d1", "headword": "etxe", "synonyms": "bizileku|egoitza"},
    {"id": "d2", "headword": "ikasten", "synonyms": "ikasi|ikastea"},
    {"id": "d3", "headword": "mendiak", "synonyms": "menditzarrak"},
    {"id": "d4", "headword": "askatasun", "synonyms": "libertate"},
    {"id": "d5", "headword": "ederra", "synonyms": "polita|dotorea"},
    {"id": "d6", "headword": "azkar", "synonyms": "bizkor|arin"},
]


def _is_active(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("0", "false", "no", "")
    if pd.isna(value):
        return True
    return bool(value)


def records_to_entries(level: str, records: List[Dict[str, Any]]) -> List[WordEntry]:
    """Converts raw rows into word entries, dropping inactive or unusable rows."""
    entries = []
    for index, row in enumerate(records):
        if not _is_active(row.get("active", True)):
            continue
        headword = row.get("headword")
        if not isinstance(headword, str) or not headword.strip():
            continue
        synonyms = row.get("synonyms")
        synonyms = normalize_synonyms(synonyms if isinstance(synonyms, str) else None)
        if not synonyms:
            continue
        word_id = row.get("id")
        if word_id is None or pd.isna(word_id):
            word_id = f"{level}:{index}"
        entries.append(WordEntry(id=word_id, headword=headword, synonyms=synonyms))
    return entries


class VocabularyManager:
    """Loads the word lists of every difficulty level and answers lookups.

    Each ``<level>.csv`` in ``directory`` holds one level, with ``headword``
    and ``synonyms`` columns (synonyms separated by ``|``) and optional ``id``
    and ``active`` columns.
    """

    def __init__(self, directory: str):
        self.directory = directory
        self.vocab_sets: Dict[str, List[WordEntry]] = {}

    def load_all(self):
        self.vocab_sets = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory, exist_ok=True)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")

        csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
        for file_path in csv_files:
            level = os.path.splitext(os.path.basename(file_path))[0]
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            if not all(column in df.columns for column in REQUIRED_COLUMNS):
                logger.error(f"Skipping {level}: Missing columns.")
                continue
            entries = records_to_entries(level, df.to_dict("records"))
            self.vocab_sets[level] = entries
            logger.info(f"Loaded {len(entries)} words from {level}")

        if not self.vocab_sets:
            logger.warning("No CSV files found. Loading dummy data.")
            self.vocab_sets["default"] = records_to_entries("default", DUMMY_WORDS)

    def get_words(self, level: str) -> List[WordEntry]:
        return list(self.vocab_sets.get(level, []))

    def get_all_active(self) -> List[WordEntry]:
        return [entry for entries in self.vocab_sets.values() for entry in entries]

    def get_levels(self) -> List[Dict[str, Any]]:
        levels = []
        for key, words in self.vocab_sets.items():
            display_name = key.replace("_", " ").title()
            levels.append({"id": key, "name": display_name, "count": len(words)})
        levels.sort(key=lambda x: x["name"])
        return levels

    def search(self, term: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Words whose headword or a synonym contains ``term``, any level."""
        needle = term.strip().lower()
        if not needle:
            return []
        results = []
        for level, entries in self.vocab_sets.items():
            for entry in entries:
                haystack = (entry.headword, *entry.synonyms)
                if any(needle in word.lower() for word in haystack):
                    results.append({**entry.model_dump(), "level": level})
                    if len(results) >= limit:
                        return results
        return results
