"""ID utilities

Pane and window ids are opaque strings. Freshly created objects get a
uuid4; ids coming from a snapshot are kept verbatim so that external
bookkeeping (drag state, history, loaded-pane lists) keeps resolving
after a whole-tree replacement.
"""

import uuid

from ..config import SHORT_ID_LENGTH


def new_id() -> str:
    """Create a fresh globally unique id.

    Returns:
        A uuid4 string like "3eb79f67-40c3-4583-a9e4-ad8224807f34"
    """
    return str(uuid.uuid4())


def ensure_id(candidate: str | None) -> str:
    """Return the candidate id, or a fresh one when it is missing or empty."""
    return candidate if candidate else new_id()


def short_id(item_id: str, length: int = SHORT_ID_LENGTH) -> str:
    """Get a short display version of an id for logging.

    Args:
        item_id: The pane or window id to shorten
        length: Maximum length (default 8)

    Returns:
        Shortened id for display in logs
    """
    return item_id[:length] if item_id else "unknown"
