"""Input validation utilities."""

import math
from typing import Any


class ValidationError(Exception):
    """Validation error."""
    pass


def validate_positive(value: Any) -> bool:
    """Check that a duration or count is a finite number above zero."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def validate_non_negative(value: Any) -> bool:
    """Check that a value is a finite number >= 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def validate_selector(selector: Any) -> bool:
    """Validate an actuator selector.

    Selectors are opaque to the controller and only interpreted by the
    locator, so anything except None or a blank string is accepted.
    """
    if selector is None:
        return False
    if isinstance(selector, str):
        return bool(selector.strip())
    return True


def coerce_number(key: str, value: Any) -> float:
    """Convert a raw config value (env var, YAML scalar) to a float."""
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number, got {value!r}")


def coerce_bool(value: Any) -> bool:
    """Interpret common truthy strings the way env vars are usually written."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
