# File: recallstack_app/modules/reviews/schemas.py
from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import ReviewDefaultConfig


class Rating(IntEnum):
    """Button labels mapped onto the 0-5 SM-2 quality scale.

    ``HARD`` sits below the passing grade: answering "hard" resets the card.
    """
    AGAIN = 0
    HARD = 2
    GOOD = 4
    EASY = 5

    @classmethod
    def from_label(cls, label: str) -> 'Rating':
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown rating label: {label!r}") from None


@dataclass(frozen=True)
class ReviewState:
    """Scheduling state of one card for one user.

    ``version`` belongs to the store: it is 0 for a state that has never been
    written and is bumped by every successful write.
    """
    reps: int
    interval: int  # days
    ease: float
    due: datetime.datetime
    version: int = 0

    @classmethod
    def initial(cls, now: datetime.datetime) -> 'ReviewState':
        return cls(
            reps=0,
            interval=0,
            ease=ReviewDefaultConfig.DEFAULT_EASE,
            due=now,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reps': self.reps,
            'interval': self.interval,
            'ease': round(self.ease, 4),
            'due': self.due.isoformat(),
            'version': self.version,
        }


@dataclass(frozen=True)
class QueueItem:
    """A due card as served to a client. Carries the prompt side only."""
    card_id: int
    deck_id: int
    front: str
    reps: int
    interval: int
    ease: float
    due: datetime.datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cardId': self.card_id,
            'deckId': self.deck_id,
            'front': self.front,
            'reps': self.reps,
            'interval': self.interval,
            'ease': round(self.ease, 4),
            'due': self.due.isoformat(),
        }


@dataclass(frozen=True)
class ResetResult:
    matched_count: int
    modified_count: int


@dataclass
class AnswerOutcome:
    """What ``ReviewScheduler.answer`` hands back to the API layer."""
    card_id: int
    quality: int
    previous: ReviewState
    state: ReviewState
    attempts: int = 1


# === Request bodies (validated at the HTTP boundary) ===

class AnswerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    card_id: int = Field(alias='cardId', gt=0)
    quality: int

    @field_validator('quality', mode='before')
    @classmethod
    def _label_to_quality(cls, value: Union[int, float, str]) -> Union[int, float, str]:
        if isinstance(value, bool):
            raise ValueError('quality must be a number or a rating label')
        if isinstance(value, str) and not value.strip().lstrip('-').isdigit():
            return int(Rating.from_label(value))
        if isinstance(value, float):
            # fractional grades are floored, like the engine does
            return int(value // 1)
        return value


class DeckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    deck_id: int = Field(alias='deckId', gt=0)


class QueueQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    deck_id: Optional[int] = Field(default=None, alias='deckId', gt=0)
    limit: Optional[int] = None

    @field_validator('limit', mode='before')
    @classmethod
    def _lenient_limit(cls, value: Any) -> Optional[int]:
        # a non-numeric limit falls back to the configured default
        if value is None or value == '':
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
