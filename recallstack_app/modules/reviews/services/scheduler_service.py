"""
Scheduler Service - orchestration of review answers, due queue and resets.

Calculations are delegated to Sm2Engine (pure logic); persistence goes
through the injected ReviewStore.
"""

from __future__ import annotations

import datetime
import logging
from typing import List, Optional, Union

from recallstack_app.utils.time_utils import ensure_utc, utcnow

from ..config import ReviewDefaultConfig
from ..engine.sm2_engine import Sm2Engine
from ..exceptions import ReviewStateNotFoundError, StaleReviewStateError
from ..schemas import AnswerOutcome, QueueItem, ResetResult
from ..signals import card_reviewed, deck_reset
from .review_store import ReviewStore

logger = logging.getLogger(__name__)


class ReviewScheduler:
    """
    Coordinates the review store and the SM-2 engine for one unit of work.

    Usage:
        scheduler = ReviewScheduler(ReviewStore(db.session))
        items = scheduler.due_queue(user_id, deck_id=3, limit=20)
        outcome = scheduler.answer(user_id, items[0].card_id, quality=4)
    """

    def __init__(
        self,
        store: ReviewStore,
        max_retries: int = 3,
        default_limit: int = ReviewDefaultConfig.QUEUE_DEFAULT_LIMIT,
        max_limit: int = ReviewDefaultConfig.QUEUE_MAX_LIMIT,
    ):
        self.store = store
        self.max_retries = max(0, max_retries)
        self.default_limit = default_limit
        self.max_limit = max(ReviewDefaultConfig.QUEUE_MIN_LIMIT, max_limit)

    @classmethod
    def from_config(cls, store: ReviewStore, config) -> 'ReviewScheduler':
        """Build a scheduler from a Flask config mapping."""
        return cls(
            store,
            max_retries=int(config.get('REVIEW_ANSWER_MAX_RETRIES', 3)),
            default_limit=int(config.get('REVIEW_QUEUE_DEFAULT_LIMIT', ReviewDefaultConfig.QUEUE_DEFAULT_LIMIT)),
            max_limit=int(config.get('REVIEW_QUEUE_MAX_LIMIT', ReviewDefaultConfig.QUEUE_MAX_LIMIT)),
        )

    def clamp_limit(self, limit: Optional[int]) -> int:
        """Clamp a caller-supplied page size into [1, max_limit]; None means default."""
        if limit is None:
            limit = self.default_limit
        return max(ReviewDefaultConfig.QUEUE_MIN_LIMIT, min(self.max_limit, int(limit)))

    # === Queue ===

    def due_queue(
        self,
        user_id: int,
        deck_id: Optional[int] = None,
        limit: Optional[int] = None,
        now: Optional[datetime.datetime] = None
    ) -> List[QueueItem]:
        """
        Cards of ``user_id`` due at ``now``, ordered by due time then card id.

        Args:
            user_id: Owner of the review states
            deck_id: Restrict to one deck (optional)
            limit: Page size, clamped into [1, 50]
            now: Reference time (default: current UTC time)

        Returns:
            Up to ``limit`` QueueItems; an empty list ends a session
        """
        now = ensure_utc(now) if now is not None else utcnow()
        items = self.store.query_due(user_id, deck_id, self.clamp_limit(limit), now)
        logger.debug("Due queue user=%s deck=%s -> %d item(s)", user_id, deck_id, len(items))
        return items

    # === Answer ===

    def answer(
        self,
        user_id: int,
        card_id: int,
        quality: Union[int, float],
        now: Optional[datetime.datetime] = None
    ) -> AnswerOutcome:
        """
        Apply one answer: load, advance, compare-and-swap write, commit.

        A concurrent write to the same card makes the write fail; the whole
        read-advance-write cycle is then retried up to ``max_retries`` times
        before the store error is raised to the caller.

        Raises:
            ReviewStateNotFoundError: the user has no state for the card
            StaleReviewStateError: still conflicting after the retries
        """
        now = ensure_utc(now) if now is not None else utcnow()
        q = Sm2Engine.clamp_quality(quality)

        attempt = 0
        while True:
            attempt += 1
            current = self.store.get(user_id, card_id)
            if current is None:
                raise ReviewStateNotFoundError(user_id, card_id)

            next_state = Sm2Engine.advance(current, q, now)
            try:
                written = self.store.put(user_id, card_id, next_state, quality=q, reviewed_at=now)
                self.store.commit()
            except StaleReviewStateError:
                self.store.rollback()
                if attempt > self.max_retries:
                    logger.warning(
                        "Giving up on card %s for user %s after %d attempt(s)",
                        card_id, user_id, attempt,
                    )
                    raise
                continue
            break

        logger.info(
            "Review user=%s card=%s q=%s (%s): reps %s->%s interval %s->%s",
            user_id, card_id, q, Sm2Engine.quality_to_description(q),
            current.reps, written.reps, current.interval, written.interval,
        )
        card_reviewed.send(self, user_id=user_id, card_id=card_id, quality=q, state=written)
        return AnswerOutcome(card_id=card_id, quality=q, previous=current, state=written, attempts=attempt)

    # === Deck-wide operations ===

    def reset_deck(
        self,
        user_id: int,
        deck_id: int,
        now: Optional[datetime.datetime] = None
    ) -> ResetResult:
        """
        Start a deck over: every state goes back to reps=0, interval=0,
        ease=2.5, due=now. Ease history is discarded on purpose.
        """
        now = ensure_utc(now) if now is not None else utcnow()
        try:
            result = self.store.bulk_reset(user_id, deck_id, now)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        logger.info(
            "Reset deck %s for user %s: matched=%d modified=%d",
            deck_id, user_id, result.matched_count, result.modified_count,
        )
        deck_reset.send(self, user_id=user_id, deck_id=deck_id, result=result)
        return result

    def seed_deck(
        self,
        user_id: int,
        deck_id: int,
        now: Optional[datetime.datetime] = None
    ) -> int:
        """Create default states (due now) for deck cards that have none."""
        now = ensure_utc(now) if now is not None else utcnow()
        try:
            created = self.store.seed_missing(user_id, deck_id, now)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        logger.info("Seeded %d review state(s) in deck %s for user %s", created, deck_id, user_id)
        return created
