BASE_POINTS = 10

# (upper bound in seconds, inclusive?, bonus)
TIME_BONUS_TIERS = (
    (2.0, False, 5),
    (4.0, False, 3),
    (7.0, True, 1),
)


def compute_bonus(elapsed_seconds: float) -> int:
    """Speed bonus for an answer given after ``elapsed_seconds``."""
    elapsed = max(0.0, elapsed_seconds)
    for limit, inclusive, bonus in TIME_BONUS_TIERS:
        if elapsed < limit or (inclusive and elapsed == limit):
            return bonus
    return 0


def compute_points(is_correct: bool, elapsed_seconds: float) -> int:
    if not is_correct:
        return 0
    return BASE_POINTS + compute_bonus(elapsed_seconds)
