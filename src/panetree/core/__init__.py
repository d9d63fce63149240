"""Core module - id utilities"""

from .ids import ensure_id, new_id, short_id

__all__ = [
    "new_id",
    "ensure_id",
    "short_id",
]
