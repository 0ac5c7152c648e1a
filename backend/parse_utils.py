from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ParseError(Exception):
    """
    Lightweight exception for route/input values that cannot be coerced.
    """

    error_code: str
    message: str


def parse_int(
    value: object,
    *,
    field: str,
    error_code: Optional[str] = None,
    message: Optional[str] = None,
) -> int:
    """
    Parse an integer value, raising ParseError on failure.

    Parameters:
      - value: the raw input (string/number)
      - field: logical field name (used for default codes/messages)
      - error_code: optional custom error code (default: f"invalid_{field}")
      - message: optional custom message (default: f"{field} must be an integer.")

    Returns: int
    """
    if isinstance(value, bool):
        value = None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ParseError(
            error_code=error_code or f"invalid_{field}",
            message=message or f"{field} must be an integer.",
        )
