from . import sync

__all__ = ["sync"]
