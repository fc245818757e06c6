"""
SM-2 Engine - Pure Spaced Repetition Transition Logic

Pure functions for the SM-2 schedule. No database access - only calculations
based on inputs.

This engine provides:
- Quality clamping onto the 0-5 scale
- Ease factor update (applied on every answer, pass or fail)
- Interval / due date calculation
"""

import datetime
import math
from dataclasses import replace
from typing import Optional, Union

from ..config import ReviewDefaultConfig
from ..schemas import ReviewState
from recallstack_app.utils.time_utils import ensure_utc, utcnow


class Sm2Engine:
    """
    Pure calculation engine for the SM-2 schedule.
    All methods are static and use only provided inputs (no DB access).
    """

    @staticmethod
    def clamp_quality(quality: Union[int, float]) -> int:
        """
        Floor ``quality`` to an int and clamp it into [0, 5].

        Out-of-range grades are clamped rather than rejected so that
        ``advance`` is total: +inf maps to 5, -inf and NaN map to 0.
        """
        if math.isnan(quality) or quality <= ReviewDefaultConfig.MIN_QUALITY:
            return ReviewDefaultConfig.MIN_QUALITY
        if quality >= ReviewDefaultConfig.MAX_QUALITY:
            return ReviewDefaultConfig.MAX_QUALITY
        return int(math.floor(quality))

    @staticmethod
    def is_passing(quality: int) -> bool:
        """Determine if a (clamped) quality counts as a successful recall."""
        return quality >= ReviewDefaultConfig.PASSING_QUALITY

    @staticmethod
    def next_ease(ease: float, quality: int) -> float:
        """
        SM-2 ease update: EF' = EF + (0.1 - (5-q) * (0.08 + (5-q)*0.02)),
        floored at 1.3.
        """
        miss = ReviewDefaultConfig.MAX_QUALITY - quality
        new_ease = ease + (0.1 - miss * (0.08 + miss * 0.02))
        return max(ReviewDefaultConfig.MIN_EASE, new_ease)

    @staticmethod
    def round_interval(value: float) -> int:
        """Round half up to whole days (12.5 -> 13, 2.5 -> 3)."""
        return int(math.floor(value + 0.5))

    @staticmethod
    def next_interval(reps: int, interval: int, ease: float) -> int:
        """
        Interval in days after a successful answer.

        Args:
            reps: Repetition count *after* the answer (>= 1)
            interval: Previous interval in days
            ease: Ease factor *after* the answer

        Returns:
            Interval in days, never below 1
        """
        if reps == 1:
            return ReviewDefaultConfig.FIRST_INTERVAL_DAYS
        if reps == 2:
            return ReviewDefaultConfig.SECOND_INTERVAL_DAYS
        return max(ReviewDefaultConfig.MIN_INTERVAL_DAYS, Sm2Engine.round_interval(interval * ease))

    @staticmethod
    def advance(
        state: ReviewState,
        quality: Union[int, float],
        now: Optional[datetime.datetime] = None
    ) -> ReviewState:
        """
        Pure function mapping (state, quality, now) to the next state.

        Args:
            state: Current review state
            quality: Answer quality on the 0-5 scale (clamped)
            now: Review time (default: current UTC time; naive means UTC)

        Returns:
            New ReviewState with the same ``version`` as the input
        """
        now = ensure_utc(now) if now is not None else utcnow()
        q = Sm2Engine.clamp_quality(quality)
        new_ease = Sm2Engine.next_ease(state.ease, q)

        if not Sm2Engine.is_passing(q):
            new_reps = 0
            new_interval = ReviewDefaultConfig.FAILURE_INTERVAL_DAYS
        else:
            new_reps = state.reps + 1
            new_interval = Sm2Engine.next_interval(new_reps, state.interval, new_ease)

        return replace(
            state,
            reps=new_reps,
            interval=new_interval,
            ease=new_ease,
            due=now + datetime.timedelta(days=new_interval),
        )

    @staticmethod
    def quality_to_description(quality: int) -> str:
        """Convert quality value to human-readable description."""
        descriptions = {
            0: "Again / Blackout",
            1: "Failed, answer familiar",
            2: "Hard (failed, answer recognised)",
            3: "Recalled with serious difficulty",
            4: "Good",
            5: "Perfect / Easy"
        }
        return descriptions.get(quality, "Unknown")


# Module-level alias used by callers that only need the transition.
advance = Sm2Engine.advance
