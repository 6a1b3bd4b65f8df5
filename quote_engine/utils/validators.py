"""Input sanitization utilities for inbound quote data."""
import math
from typing import Any, Optional


def sanitize_string(value: Any, max_length: int, default: str = "") -> str:
    """
    Sanitize string value for storage.

    Args:
        value: Value to sanitize
        max_length: Maximum allowed length
        default: Default value if value is invalid

    Returns:
        Trimmed string, truncated to max_length, or default if empty
    """
    if value is None:
        return default

    str_value = str(value).strip()

    if len(str_value) > max_length:
        str_value = str_value[:max_length]

    if not str_value:
        return default

    return str_value


def sanitize_float(value: Any, default: float = 0.0, min_value: Optional[float] = None, max_value: Optional[float] = None) -> float:
    """
    Coerce a value to a finite float and clamp it into range.

    Args:
        value: Value to sanitize
        default: Default value if value is missing or not numeric
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive)

    Returns:
        Sanitized float
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        float_value = float(value)
    except (ValueError, TypeError):
        return default

    if math.isnan(float_value) or math.isinf(float_value):
        return default

    return clamp(float_value, min_value, max_value)


def clamp(value: float, min_value: Optional[float] = None, max_value: Optional[float] = None) -> float:
    """
    Clamp value into [min_value, max_value]; either bound may be omitted.
    """
    if min_value is not None and value < min_value:
        return min_value
    if max_value is not None and value > max_value:
        return max_value
    return value


def is_blank(value: Optional[str]) -> bool:
    """True when value is None or contains only whitespace."""
    return not (value or "").strip()

