from .sm2_engine import Sm2Engine, advance

__all__ = ["Sm2Engine", "advance"]
