from .review_store import ReviewStore
from .scheduler_service import ReviewScheduler

__all__ = ["ReviewStore", "ReviewScheduler"]
