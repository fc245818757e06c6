from datetime import datetime, timezone

from recallstack_app.core.extensions import db
from recallstack_app.utils.time_utils import ensure_utc

from .config import ReviewDefaultConfig
from .schemas import ReviewState


class ReviewStateRecord(db.Model):
    """
    Persisted SM-2 state of one card for one user.

    ``version`` is the compare-and-swap counter: every write must name the
    version it read and bumps it by one.
    """
    __tablename__ = 'review_states'

    state_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False
    )
    card_id = db.Column(
        db.Integer, db.ForeignKey('cards.card_id', ondelete='CASCADE'), nullable=False, index=True
    )

    # SM-2 state
    reps = db.Column(db.Integer, nullable=False, default=0)
    interval = db.Column(db.Integer, nullable=False, default=0)  # days
    ease = db.Column(db.Float, nullable=False, default=ReviewDefaultConfig.DEFAULT_EASE)
    due = db.Column(db.DateTime(timezone=True), nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)

    # Answer bookkeeping
    last_quality = db.Column(db.Integer, nullable=True)
    lapses = db.Column(db.Integer, nullable=False, default=0)
    last_reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    card = db.relationship(
        'Card',
        backref=db.backref('review_states', lazy='dynamic', cascade='all, delete-orphan', passive_deletes=True),
        lazy=True,
    )
    user = db.relationship(
        'User',
        backref=db.backref('review_states', lazy='dynamic', cascade='all, delete-orphan', passive_deletes=True),
        lazy=True,
    )

    __table_args__ = (
        db.UniqueConstraint('user_id', 'card_id', name='uq_review_state_user_card'),
        db.Index('ix_review_states_user_due', 'user_id', 'due', 'card_id'),
    )

    def to_state(self) -> ReviewState:
        return ReviewState(
            reps=self.reps,
            interval=self.interval,
            ease=self.ease,
            due=ensure_utc(self.due),
            version=self.version,
        )
