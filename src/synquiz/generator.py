import random
from typing import List, Mapping, Optional, Sequence, TypeVar

from .classifier import classify
from .models import FailureStat, QuestionItem, WordEntry

T = TypeVar("T")

NUM_DISTRACTORS = 3
# Below this many same-bucket candidates the whole candidate pool is used.
MIN_SAME_TYPE_CANDIDATES = 10


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """Returns a uniformly permuted copy of ``items``."""
    result = list(items)
    rng.shuffle(result)
    return result


def failure_weight(stat: Optional[FailureStat]) -> float:
    """Sampling weight of a word given the player's failure history."""
    if stat is None:
        return 1.0
    weight = 1 + stat.wrong * 3
    if stat.attempts > 0:
        weight += (stat.wrong / stat.attempts) * 5
    return max(1.0, weight)


class PoolGenerator:
    """Builds the question pool for one game.

    The first ``min(needed, len(source))`` words are a shuffled, duplicate-free
    slice of the source. Any remaining slots are drawn with replacement,
    favouring words the player has failed before.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(
        self,
        needed: int,
        source: Sequence[WordEntry],
        weights: Optional[Mapping[str, FailureStat]] = None,
    ) -> List[QuestionItem]:
        if not source or needed <= 0:
            return []

        selected = self._select_words(needed, source, weights or {})
        return [self._build_question(entry, source) for entry in selected]

    def _select_words(
        self,
        needed: int,
        source: Sequence[WordEntry],
        weights: Mapping[str, FailureStat],
    ) -> List[WordEntry]:
        selected = shuffled(source, self.rng)[: min(needed, len(source))]
        remaining = needed - len(selected)
        if remaining > 0:
            selected.extend(self.pick_weighted(source, weights, remaining))
        return selected

    def pick_weighted(
        self,
        source: Sequence[WordEntry],
        weights: Mapping[str, FailureStat],
        k: int = 1,
    ) -> List[WordEntry]:
        """Draws ``k`` words with replacement, proportionally to their weight."""
        word_weights = [failure_weight(weights.get(entry.id)) for entry in source]
        return self.rng.choices(source, weights=word_weights, k=k)

    def _build_question(
        self, entry: WordEntry, source: Sequence[WordEntry]
    ) -> QuestionItem:
        correct_answer = self.rng.choice(entry.synonyms)
        return QuestionItem(
            source_word=entry,
            correct_answer=correct_answer,
            options=tuple(self._generate_options(correct_answer, entry, source)),
        )

    def _generate_options(
        self, correct_answer: str, entry: WordEntry, source: Sequence[WordEntry]
    ) -> List[str]:
        """Correct answer plus up to three distractors, shuffled.

        Candidates are all headwords and synonyms of the source except the
        entry's own. Candidates in the same morphological bucket as the
        headword are preferred when at least ten of them occur, repeats
        included; duplicates are removed afterwards.
        """
        excluded = {entry.headword, *entry.synonyms}
        candidates = [
            word
            for other in source
            for word in (other.headword, *other.synonyms)
            if word not in excluded
        ]

        target_type = classify(entry.headword)
        same_type = [word for word in candidates if classify(word) == target_type]
        if len(same_type) >= MIN_SAME_TYPE_CANDIDATES:
            candidates = same_type

        unique = list(dict.fromkeys(candidates))
        distractors = shuffled(unique, self.rng)[:NUM_DISTRACTORS]
        return shuffled([correct_answer, *distractors], self.rng)


def generate_pool(
    needed: int,
    source: Sequence[WordEntry],
    weights: Optional[Mapping[str, FailureStat]] = None,
    rng: Optional[random.Random] = None,
) -> List[QuestionItem]:
    return PoolGenerator(rng).generate(needed, source, weights)
