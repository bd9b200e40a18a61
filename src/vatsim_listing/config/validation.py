"""
Field validators shared by the configuration sections.

Each helper resolves a single value (explicit value, then default), checks
it, and records a human readable problem in ``errors`` instead of raising.
Sections collect every problem first so the caller can report them together.
"""

from __future__ import annotations

from typing import Any, List


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_string(
    errors: List[str], name: str, value: Any, default: str | None = None
) -> str:
    """Return ``value`` (or ``default``) as a string, recording a missing value."""
    if _blank(value):
        value = default
    if _blank(value):
        errors.append(f"{name} is required")
        return ""
    return str(value).strip()


def optional_string(value: Any, default: str | None = None) -> str | None:
    if _blank(value):
        value = default
    if _blank(value):
        return None
    return str(value).strip()


def require_number(
    errors: List[str],
    name: str,
    value: Any,
    default: float | None = None,
    *,
    minimum: float | None = None,
) -> float:
    """Return ``value`` (or ``default``) as a float, recording invalid input."""
    if _blank(value):
        value = default
    if _blank(value):
        errors.append(f"{name} is required")
        return 0.0

    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(f"{name} must be a number, got {value!r}")
        return 0.0

    if number != number:  # NaN
        errors.append(f"{name} must be a number, got {value!r}")
        return 0.0
    if minimum is not None and number < minimum:
        errors.append(f"{name} must be >= {minimum:g}, got {number:g}")
    return number


def require_id(errors: List[str], name: str, value: Any) -> int:
    """Return ``value`` as a positive integer identifier, recording invalid input."""
    if _blank(value):
        errors.append(f"{name} is required")
        return 0
    if isinstance(value, bool):
        errors.append(f"{name} must be an integer id, got {value!r}")
        return 0
    try:
        number = int(str(value).strip())
    except ValueError:
        errors.append(f"{name} must be an integer id, got {value!r}")
        return 0
    if number < 1:
        errors.append(f"{name} must be >= 1, got {number}")
    return number


def require_bool(errors: List[str], name: str, value: Any, default: bool) -> bool:
    if _blank(value):
        return default
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    errors.append(f"{name} must be a boolean, got {value!r}")
    return default


__all__ = ["require_string", "optional_string", "require_number", "require_id", "require_bool"]
