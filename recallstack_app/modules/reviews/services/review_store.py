"""
Review Store - Database Layer for Review State

Handles persistence of per-(user, card) SM-2 state. No scheduling math here;
the store only loads, writes and queries rows.

Writes are compare-and-swap on ``ReviewStateRecord.version`` so that two
answers racing on the same card cannot silently overwrite each other.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import replace
from typing import List, Optional

from sqlalchemy import and_, exists, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recallstack_app.models import Card, Deck
from recallstack_app.utils.time_utils import ensure_utc, utcnow

from ..config import ReviewDefaultConfig
from ..exceptions import StaleReviewStateError
from ..models import ReviewStateRecord
from ..schemas import QueueItem, ResetResult, ReviewState

logger = logging.getLogger(__name__)


class ReviewStore:
    """
    SQLAlchemy-backed store of review states.

    The session is injected by the caller and is the unit of work: the store
    never commits on its own except through ``commit()``.
    """

    def __init__(self, session: Session):
        self.session = session

    # === Unit of work ===

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    # === Single state ===

    def get(self, user_id: int, card_id: int) -> Optional[ReviewState]:
        """
        Load the state of one card.

        Returns:
            ReviewState, or None when the user has no state for the card
        """
        stmt = (
            select(ReviewStateRecord)
            .filter_by(user_id=user_id, card_id=card_id)
            .execution_options(populate_existing=True)
        )
        record = self.session.execute(stmt).scalar_one_or_none()
        if record is None:
            return None
        return record.to_state()

    def put(
        self,
        user_id: int,
        card_id: int,
        state: ReviewState,
        *,
        quality: Optional[int] = None,
        reviewed_at: Optional[datetime.datetime] = None
    ) -> ReviewState:
        """
        Write ``state`` if the stored version still equals ``state.version``.

        A state with version 0 is inserted; it conflicts if a row already
        exists. When ``quality`` is given the answer bookkeeping columns
        (last_quality, last_reviewed_at, lapses) are updated in the same
        statement.

        A first write that loses an insert race rolls the session back before
        raising, like any other conflict the caller retries from scratch.

        Args:
            user_id: Owner of the state
            card_id: Card the state belongs to
            state: New state; ``version`` is the version it was derived from
            quality: Clamped quality of the answer that produced ``state``
            reviewed_at: Time of that answer

        Returns:
            The written state carrying its new version

        Raises:
            StaleReviewStateError: the stored version differs, or another
                first write of the same card got in first
        """
        due = ensure_utc(state.due)
        now = utcnow()

        if state.version == 0:
            if self._exists(user_id, card_id):
                raise StaleReviewStateError(user_id, card_id, 0)
            values = dict(
                user_id=user_id,
                card_id=card_id,
                reps=state.reps,
                interval=state.interval,
                ease=state.ease,
                due=due,
                version=1,
                lapses=0,
                created_at=now,
                updated_at=now,
            )
            if quality is not None:
                values.update(
                    last_quality=quality,
                    last_reviewed_at=ensure_utc(reviewed_at) or now,
                    lapses=0 if quality >= ReviewDefaultConfig.PASSING_QUALITY else 1,
                )
            try:
                self.session.execute(insert(ReviewStateRecord).values(**values))
            except IntegrityError:
                self.session.rollback()
                if self._exists(user_id, card_id):
                    # lost the race against another first write of this card
                    raise StaleReviewStateError(user_id, card_id, 0) from None
                raise
            return replace(state, due=due, version=1)

        values = dict(
            reps=state.reps,
            interval=state.interval,
            ease=state.ease,
            due=due,
            version=ReviewStateRecord.version + 1,
            updated_at=now,
        )
        if quality is not None:
            values.update(
                last_quality=quality,
                last_reviewed_at=ensure_utc(reviewed_at) or now,
            )
            if quality < ReviewDefaultConfig.PASSING_QUALITY:
                values['lapses'] = ReviewStateRecord.lapses + 1

        result = self.session.execute(
            update(ReviewStateRecord)
            .where(
                ReviewStateRecord.user_id == user_id,
                ReviewStateRecord.card_id == card_id,
                ReviewStateRecord.version == state.version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info(
                "CAS miss on review state user=%s card=%s expected_version=%s",
                user_id, card_id, state.version,
            )
            raise StaleReviewStateError(user_id, card_id, state.version)
        return replace(state, due=due, version=state.version + 1)

    # === Queries ===

    def query_due(
        self,
        user_id: int,
        deck_id: Optional[int],
        limit: int,
        now: datetime.datetime
    ) -> List[QueueItem]:
        """
        States of ``user_id`` with ``due <= now``, oldest due first, ties
        broken by card id. ``limit`` is applied as given.
        """
        conditions = [
            ReviewStateRecord.user_id == user_id,
            ReviewStateRecord.due <= ensure_utc(now),
        ]
        if deck_id is not None:
            conditions.append(Card.deck_id == deck_id)

        stmt = (
            select(
                ReviewStateRecord.card_id,
                Card.deck_id,
                Card.front,
                ReviewStateRecord.reps,
                ReviewStateRecord.interval,
                ReviewStateRecord.ease,
                ReviewStateRecord.due,
            )
            .join(Card, Card.card_id == ReviewStateRecord.card_id)
            .where(*conditions)
            .order_by(ReviewStateRecord.due.asc(), ReviewStateRecord.card_id.asc())
            .limit(limit)
        )
        return [
            QueueItem(
                card_id=row.card_id,
                deck_id=row.deck_id,
                front=row.front,
                reps=row.reps,
                interval=row.interval,
                ease=row.ease,
                due=ensure_utc(row.due),
            )
            for row in self.session.execute(stmt)
        ]

    def owns_deck(self, user_id: int, deck_id: int) -> bool:
        stmt = select(Deck.deck_id).filter_by(deck_id=deck_id, owner_user_id=user_id)
        return self.session.execute(stmt).first() is not None

    def owns_card(self, user_id: int, card_id: int) -> bool:
        stmt = select(Card.card_id).filter_by(card_id=card_id, owner_user_id=user_id)
        return self.session.execute(stmt).first() is not None

    # === Bulk operations ===

    def bulk_reset(self, user_id: int, deck_id: int, now: datetime.datetime) -> ResetResult:
        """
        Put every state of ``user_id`` in ``deck_id`` back to the defaults,
        due at ``now``.

        Rows already equal to the defaults are matched but not modified, so
        a repeated reset with the same ``now`` modifies nothing.
        """
        now = ensure_utc(now)
        in_deck = and_(
            ReviewStateRecord.user_id == user_id,
            ReviewStateRecord.card_id.in_(select(Card.card_id).where(Card.deck_id == deck_id)),
        )
        matched = self.session.execute(
            select(func.count()).select_from(ReviewStateRecord).where(in_deck)
        ).scalar_one()

        differs = or_(
            ReviewStateRecord.reps != 0,
            ReviewStateRecord.interval != 0,
            ReviewStateRecord.ease != ReviewDefaultConfig.DEFAULT_EASE,
            ReviewStateRecord.due != now,
        )
        result = self.session.execute(
            update(ReviewStateRecord)
            .where(in_deck, differs)
            .values(
                reps=0,
                interval=0,
                ease=ReviewDefaultConfig.DEFAULT_EASE,
                due=now,
                version=ReviewStateRecord.version + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        return ResetResult(matched_count=matched, modified_count=result.rowcount)

    def seed_missing(self, user_id: int, deck_id: int, now: datetime.datetime) -> int:
        """
        Create default states, due at ``now``, for the user's cards in
        ``deck_id`` that have none. Existing states are left untouched.

        Returns:
            Number of states created
        """
        now = ensure_utc(now)
        has_state = exists().where(
            ReviewStateRecord.user_id == user_id,
            ReviewStateRecord.card_id == Card.card_id,
        )
        card_ids = self.session.execute(
            select(Card.card_id)
            .where(Card.deck_id == deck_id, Card.owner_user_id == user_id, ~has_state)
            .order_by(Card.card_id)
        ).scalars().all()
        if not card_ids:
            return 0

        initial = ReviewState.initial(now)
        stamp = utcnow()
        self.session.execute(
            insert(ReviewStateRecord),
            [
                dict(
                    user_id=user_id,
                    card_id=card_id,
                    reps=initial.reps,
                    interval=initial.interval,
                    ease=initial.ease,
                    due=initial.due,
                    version=1,
                    lapses=0,
                    created_at=stamp,
                    updated_at=stamp,
                )
                for card_id in card_ids
            ],
        )
        return len(card_ids)

    def _exists(self, user_id: int, card_id: int) -> bool:
        stmt = select(ReviewStateRecord.state_id).filter_by(user_id=user_id, card_id=card_id)
        return self.session.execute(stmt).first() is not None
