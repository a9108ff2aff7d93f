# app/domain/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CalloutIntent(str, Enum):
    fetch = "fetch"
    push = "push"
    none = "none"


@dataclass(frozen=True)
class ContactRef:
    """Snapshot of the identifying fields of a contact at classification time."""
    contact_id: int | None
    external_id: str | None


@dataclass(frozen=True)
class Batch:
    intent: CalloutIntent
    refs: tuple[ContactRef, ...]

    def __len__(self) -> int:
        return len(self.refs)


@dataclass(frozen=True)
class CalloutResult:
    ok: bool
    error: str | None = None
