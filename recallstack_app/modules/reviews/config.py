# modules/reviews/config.py


class ReviewDefaultConfig:
    """Constants of the SM-2 schedule."""
    DEFAULT_EASE = 2.5
    MIN_EASE = 1.3
    MIN_QUALITY = 0
    MAX_QUALITY = 5
    PASSING_QUALITY = 3  # q >= 3 counts as recalled
    FIRST_INTERVAL_DAYS = 1
    SECOND_INTERVAL_DAYS = 6
    FAILURE_INTERVAL_DAYS = 1
    MIN_INTERVAL_DAYS = 1

    QUEUE_DEFAULT_LIMIT = 10
    QUEUE_MIN_LIMIT = 1
    QUEUE_MAX_LIMIT = 50
