# app/domain/dispatch.py
"""
Classifies changed contacts into callout intents and groups them into batches.

No I/O happens here: the caller (a flush hook) hands over the contacts of one
change set, gets back immutable batches, and decides when to submit them.

Rules:
  insert: missing external_id gets a generated one; key <= 100 -> fetch
  update: key > 100 -> push
Anything else is left alone. The thresholds are deliberately asymmetric, so a
fresh insert never pushes.
"""
from __future__ import annotations

from typing import Iterable

from ..models import Contact
from .ids import IdGenerator, random_external_id
from .parsing import to_int
from .types import Batch, CalloutIntent, ContactRef

FETCH_MAX_KEY = 100


def _key(contact: Contact) -> int | None:
    """external_id as an int, or None when it is missing, malformed or negative."""
    key = to_int(contact.external_id)
    if key is None or key < 0:
        return None
    return key


class ChangeDispatcher:
    def __init__(self, id_generator: IdGenerator | None = None) -> None:
        self.id_generator = id_generator or random_external_id

    def classify_insert(self, contact: Contact) -> CalloutIntent:
        """May assign contact.external_id as a side effect."""
        if contact.external_id is None:
            contact.external_id = self.id_generator()

        key = _key(contact)
        if key is not None and key <= FETCH_MAX_KEY:
            return CalloutIntent.fetch
        return CalloutIntent.none

    def classify_update(self, contact: Contact) -> CalloutIntent:
        key = _key(contact)
        if key is not None and key > FETCH_MAX_KEY:
            return CalloutIntent.push
        return CalloutIntent.none

    def dispatch(
        self,
        inserted: Iterable[Contact] = (),
        updated: Iterable[Contact] = (),
    ) -> list[Batch]:
        """
        Classify one change set. Returns the fetch batch then the push batch,
        each only when non-empty, preserving encounter order.
        """
        fetch_refs: list[ContactRef] = []
        push_refs: list[ContactRef] = []

        for contact in inserted:
            if self.classify_insert(contact) is CalloutIntent.fetch:
                fetch_refs.append(ContactRef(contact_id=contact.id, external_id=contact.external_id))

        for contact in updated:
            if self.classify_update(contact) is CalloutIntent.push:
                push_refs.append(ContactRef(contact_id=contact.id, external_id=contact.external_id))

        batches: list[Batch] = []
        if fetch_refs:
            batches.append(Batch(intent=CalloutIntent.fetch, refs=tuple(fetch_refs)))
        if push_refs:
            batches.append(Batch(intent=CalloutIntent.push, refs=tuple(push_refs)))
        return batches


def merge_batches(batches: Iterable[Batch]) -> list[Batch]:
    """
    Collapse the batches of several flushes into at most one per intent.

    Fetch refs are de-duplicated by external_id, push refs by contact_id; the
    first occurrence keeps its position. Fetch comes before push.
    """
    seen: dict[CalloutIntent, set] = {CalloutIntent.fetch: set(), CalloutIntent.push: set()}
    refs: dict[CalloutIntent, list[ContactRef]] = {CalloutIntent.fetch: [], CalloutIntent.push: []}

    for batch in batches:
        if batch.intent not in refs:
            continue
        for ref in batch.refs:
            ident = ref.external_id if batch.intent is CalloutIntent.fetch else ref.contact_id
            if ident in seen[batch.intent]:
                continue
            seen[batch.intent].add(ident)
            refs[batch.intent].append(ref)

    return [Batch(intent=intent, refs=tuple(r)) for intent, r in refs.items() if r]
