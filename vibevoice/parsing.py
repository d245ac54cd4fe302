"""Shared parsing helpers for configuration and response value normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer, rejecting booleans and blank values.

    Raises:
        ValueError: If the value is not a positive integer.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive integer.")
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_non_negative_float(value: object, field_name: str) -> float:
    """Parse a float that is zero or greater.

    Raises:
        ValueError: If the value is not numeric or is negative.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a non-negative number.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a non-negative number.")
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a non-negative number.") from exc
    if parsed < 0.0:
        raise ValueError(f"`{field_name}` must be a non-negative number.")
    return parsed


def optional_int(value: object) -> int | None:
    """Coerce a loosely typed response value to `int`, returning `None` when absent."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    try:
        return int(float(normalized))
    except ValueError:
        return None
