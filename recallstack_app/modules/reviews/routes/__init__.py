from .api import reviews_api_bp

__all__ = ["reviews_api_bp"]
