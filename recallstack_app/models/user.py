"""User model; accounts are provisioned outside this service."""

from __future__ import annotations

from flask_login import UserMixin
from sqlalchemy.sql import func

from ..core.extensions import db


class User(UserMixin, db.Model):
    """Application user model."""

    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    decks = db.relationship('Deck', backref='owner', lazy=True, cascade='all, delete-orphan')

    def get_id(self):
        return str(self.user_id)

    def __repr__(self) -> str:
        return f"<User {self.username}>"
