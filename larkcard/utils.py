"""
Utility functions for larkcard.
"""
import json
import math
import re
import time
from typing import Any, Optional


def now_ms() -> float:
    """
    Get the current wall-clock time in epoch milliseconds.

    Returns:
        Milliseconds since the epoch
    """
    return time.time() * 1000


def normalize_whitespace(text: Optional[str]) -> str:
    """
    Collapse runs of whitespace into single spaces and strip the ends.

    Args:
        text: The text to normalize (None is treated as empty)

    Returns:
        Normalized text
    """
    return re.sub(r'\s+', ' ', text or '').strip()


def safe_text(value: Any) -> str:
    """
    Render an arbitrary producer value as text.

    Strings are returned unchanged, None becomes an empty string and
    everything else is JSON-encoded, falling back to str() when the value
    is not serializable.

    Args:
        value: Any value

    Returns:
        Text representation of the value
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def as_finite_number(value: Any) -> Optional[float]:
    """
    Return value if it is a finite int or float, else None.

    Booleans are rejected, as are NaN and infinities (which json.loads accepts).
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def format_seconds(duration_ms: float) -> str:
    """
    Format a millisecond duration as seconds with one decimal place.

    Negative durations are clamped to zero.
    """
    return f"{max(duration_ms, 0) / 1000:.1f}"
