# app/domain/parsing.py
from __future__ import annotations

from typing import Any


def to_int(x: Any) -> int | None:
    if x is None or x == "":
        return None
    try:
        return int(str(x).strip())
    except (TypeError, ValueError):
        return None


def is_blank(x: Any) -> bool:
    """None, empty and whitespace-only strings are blank."""
    if x is None:
        return True
    return not str(x).strip()


def default_if_blank(x: Any, default: str) -> Any:
    return default if is_blank(x) else x
