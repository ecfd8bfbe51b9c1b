import random
from collections import Counter

from synquiz.classifier import WordType, classify
from synquiz.generator import PoolGenerator, failure_weight, generate_pool, shuffled
from synquiz.models import FailureStat, WordEntry


def test_empty_source_gives_empty_pool(rng):
    assert generate_pool(5, [], rng=rng) == []


def test_non_positive_count_gives_empty_pool(words, rng):
    assert generate_pool(0, words, rng=rng) == []
    assert generate_pool(-3, words, rng=rng) == []


def test_small_pool_has_no_duplicate_words(words, rng):
    pool = generate_pool(5, words, rng=rng)
    assert len(pool) == 5
    ids = [q.source_word.id for q in pool]
    assert len(set(ids)) == 5


def test_pool_covering_whole_source_uses_every_word_once(words, rng):
    pool = generate_pool(len(words), words, rng=rng)
    assert sorted(q.source_word.id for q in pool) == sorted(w.id for w in words)


def test_large_pool_is_filled_to_requested_length(words, rng):
    pool = generate_pool(30, words, rng=rng)
    assert len(pool) == 30
    head = [q.source_word.id for q in pool[: len(words)]]
    assert len(set(head)) == len(words)


def test_correct_answer_is_a_synonym_and_appears_once(words, rng):
    for question in generate_pool(40, words, rng=rng):
        assert question.correct_answer in question.source_word.synonyms
        assert question.options.count(question.correct_answer) == 1


def test_options_are_unique_and_exclude_own_words(words, rng):
    for question in generate_pool(20, words, rng=rng):
        assert len(question.options) == 4
        assert len(set(question.options)) == 4
        own = {question.source_word.headword, *question.source_word.synonyms}
        distractors = [o for o in question.options if o != question.correct_answer]
        assert not own.intersection(distractors)


def test_single_entry_source():
    source = [WordEntry(id=1, headword="etxe", synonyms=["bizileku"])]
    pool = generate_pool(1, source)
    assert len(pool) == 1
    assert pool[0].correct_answer == "bizileku"
    assert pool[0].options == ("bizileku",)


def test_tiny_source_returns_fewer_options(rng):
    source = [
        WordEntry(id=1, headword="etxe", synonyms=["bizileku"]),
        WordEntry(id=2, headword="lagun", synonyms=["adiskide"]),
    ]
    pool = generate_pool(2, source, rng=rng)
    for question in pool:
        assert len(question.options) == 3
        assert question.correct_answer in question.options


def test_same_bucket_distractors_are_preferred(rng):
    verbs = [
        WordEntry(id=f"v{i}", headword=f"verb{i}tu", synonyms=[f"hitz{i}tzen"])
        for i in range(12)
    ]
    others = [
        WordEntry(id=f"o{i}", headword=f"gauza{i}o", synonyms=[f"objekt{i}o"])
        for i in range(12)
    ]
    source = verbs + others
    generator = PoolGenerator(rng)
    for _ in range(20):
        options = generator._generate_options("hitz0tzen", verbs[0], source)
        assert all(classify(option) == WordType.VERB for option in options)


def test_falls_back_to_all_candidates_when_bucket_is_small(rng):
    source = [
        WordEntry(id=1, headword="ikasten", synonyms=["ikasi"]),
        WordEntry(id=2, headword="etxe", synonyms=["bizileku"]),
        WordEntry(id=3, headword="lagun", synonyms=["adiskide"]),
    ]
    generator = PoolGenerator(rng)
    seen = set()
    for _ in range(50):
        seen.update(generator._generate_options("ikasi", source[0], source))
    assert {"etxe", "bizileku", "lagun", "adiskide"} <= seen


def test_failure_weight():
    assert failure_weight(None) == 1.0
    assert failure_weight(FailureStat(word_id=1, wrong=0, attempts=0)) == 1.0
    assert failure_weight(FailureStat(word_id=1, wrong=0, attempts=5)) == 1.0
    assert failure_weight(FailureStat(word_id=1, wrong=2, attempts=4)) == 9.5


def test_weighted_sampling_favours_failed_words(rng):
    easy = WordEntry(id="easy", headword="etxe", synonyms=["bizileku"])
    hard = WordEntry(id="hard", headword="lagun", synonyms=["adiskide"])
    weights = {
        "easy": FailureStat(word_id="easy", wrong=0, attempts=4),
        "hard": FailureStat(word_id="hard", wrong=4, attempts=4),
    }
    drawn = PoolGenerator(rng).pick_weighted([easy, hard], weights, k=10_000)
    counts = Counter(entry.id for entry in drawn)
    assert counts["hard"] > counts["easy"] * 5


def test_unweighted_fill_still_reaches_every_word(words, rng):
    pool = generate_pool(200, words, rng=rng)
    assert {q.source_word.id for q in pool[len(words):]} == {w.id for w in words}


def test_seeded_generators_are_reproducible(words):
    first = generate_pool(12, words, rng=random.Random(7))
    second = generate_pool(12, words, rng=random.Random(7))
    assert first == second


def test_shuffled_returns_a_permuted_copy(rng):
    items = list(range(20))
    result = shuffled(items, rng)
    assert items == list(range(20))
    assert sorted(result) == items


def test_repeated_same_bucket_words_count_towards_the_threshold(rng):
    target = WordEntry(id="t", headword="ikasten", synonyms=["ikasi"])
    repeated_verbs = [
        WordEntry(id=f"v{i}", headword="ibiltzen", synonyms=["joaten"]) for i in range(6)
    ]
    fillers = [
        WordEntry(id=f"o{i}", headword=f"gauza{i}o", synonyms=[f"objekt{i}o"])
        for i in range(10)
    ]
    source = [target, *repeated_verbs, *fillers]
    generator = PoolGenerator(rng)
    for _ in range(50):
        options = generator._generate_options("ikasi", target, source)
        assert sorted(options) == ["ibiltzen", "ikasi", "joaten"]
