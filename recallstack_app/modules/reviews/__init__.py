"""
Reviews module - spaced-repetition scheduling.

Layout:
- engine/: pure SM-2 transition function (no I/O)
- services/review_store.py: persistence of per-card review state
- services/scheduler_service.py: answer / due queue / reset / seed orchestration
- routes/api.py: thin JSON API over the scheduler
"""

from .engine import Sm2Engine, advance
from .schemas import QueueItem, Rating, ResetResult, ReviewState

__all__ = [
    "Sm2Engine",
    "advance",
    "QueueItem",
    "Rating",
    "ResetResult",
    "ReviewState",
]
