"""Deck and card models.

Only the columns the review scheduler reads are modelled here. Decks and
cards are created by whatever owns the content.
"""

from __future__ import annotations

from sqlalchemy.sql import func

from ..core.extensions import db


class Deck(db.Model):
    """A titled collection of cards owned by one user."""

    __tablename__ = 'decks'

    deck_id = db.Column(db.Integer, primary_key=True)
    owner_user_id = db.Column(
        db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True
    )
    title = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    cards = db.relationship(
        'Card',
        backref='deck',
        lazy=True,
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    __table_args__ = (
        db.UniqueConstraint('owner_user_id', 'title', name='uq_deck_owner_title'),
    )

    def __repr__(self) -> str:
        return f"<Deck {self.deck_id}: {self.title}>"


class Card(db.Model):
    """A single flashcard. ``back`` holds the answer side."""

    __tablename__ = 'cards'

    card_id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(
        db.Integer, db.ForeignKey('decks.deck_id', ondelete='CASCADE'), nullable=False, index=True
    )
    owner_user_id = db.Column(
        db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True
    )
    front = db.Column(db.Text, nullable=False)
    back = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Card {self.card_id} in deck {self.deck_id}>"
