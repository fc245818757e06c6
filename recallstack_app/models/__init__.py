"""Database models package for RecallStack."""

from ..core.extensions import db

from .user import User
from .deck import Card, Deck

__all__ = [
    'db',
    'User',
    'Deck',
    'Card',
]
