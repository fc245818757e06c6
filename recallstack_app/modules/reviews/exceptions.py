from recallstack_app.core.error_handlers import ConflictError, NotFoundError


class ReviewStateNotFoundError(NotFoundError):
    """Raised when a card has no review state for the requesting user."""

    def __init__(self, user_id: int, card_id: int):
        super().__init__(
            message=f"No review state for card {card_id}",
            resource='review_state',
        )
        self.user_id = user_id
        self.card_id = card_id


class StaleReviewStateError(ConflictError):
    """Raised when a compare-and-swap write finds a different stored version."""

    def __init__(self, user_id: int, card_id: int, expected_version: int):
        super().__init__(
            message=f"Review state for card {card_id} changed concurrently",
            details={'card_id': card_id, 'expected_version': expected_version},
        )
        self.user_id = user_id
        self.card_id = card_id
        self.expected_version = expected_version
