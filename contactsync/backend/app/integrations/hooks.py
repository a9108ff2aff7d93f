# app/integrations/hooks.py
"""
SQLAlchemy session hook that turns contact mutations into deferred callouts.

before_flush           classify new/modified contacts, stash batches in session.info
                       tagged with the (innermost) transaction they belong to
after_soft_rollback    drop batches of the rolled-back transaction and its savepoints
after_commit           merge the stashed batches and hand them to the job queue
after_transaction_end  drop whatever was not committed (close without commit)

Nothing here touches the network. Sessions flagged with SKIP_CALLOUTS (the
callout jobs' own sessions) are ignored so write-backs don't loop.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction

from ..db import SKIP_CALLOUTS
from ..domain.dispatch import ChangeDispatcher, merge_batches
from ..domain.types import Batch
from ..jobs.queue import JobQueue
from ..models import Contact

log = logging.getLogger(__name__)

# session.info key -> list[tuple[SessionTransaction | None, Batch]]
PENDING_BATCHES = "pending_callout_batches"


def _within(owner: SessionTransaction | None, transaction: SessionTransaction) -> bool:
    while owner is not None:
        if owner is transaction:
            return True
        owner = owner.parent
    return False


class CalloutHook:
    def __init__(self, queue: JobQueue, dispatcher: ChangeDispatcher | None = None, target: Any = Session) -> None:
        self.queue = queue
        self.dispatcher = dispatcher or ChangeDispatcher()
        self.target = target

    def before_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        if session.info.get(SKIP_CALLOUTS):
            return

        inserted = [o for o in session.new if isinstance(o, Contact)]
        # dirty is unordered; walk updates in primary-key order
        updated = sorted(
            (o for o in session.dirty if isinstance(o, Contact) and session.is_modified(o)),
            key=lambda o: o.id,
        )
        if not inserted and not updated:
            return

        batches = self.dispatcher.dispatch(inserted=inserted, updated=updated)
        if batches:
            # None: nothing begun yet, the flush autobegins the root transaction
            owner = session.get_nested_transaction() or session.get_transaction()
            session.info.setdefault(PENDING_BATCHES, []).extend((owner, b) for b in batches)

    def after_soft_rollback(self, session: Session, previous_transaction: SessionTransaction) -> None:
        pending = session.info.get(PENDING_BATCHES)
        if not pending:
            return

        if previous_transaction.parent is None:
            kept = []
        else:
            kept = [(owner, b) for owner, b in pending if not _within(owner, previous_transaction)]

        dropped = len(pending) - len(kept)
        if kept:
            session.info[PENDING_BATCHES] = kept
        else:
            session.info.pop(PENDING_BATCHES, None)
        if dropped:
            log.info("rollback: discarded %d callout batch(es)", dropped)

    def after_commit(self, session: Session) -> None:
        pending = session.info.pop(PENDING_BATCHES, [])
        batches: list[Batch] = merge_batches(b for _, b in pending)
        for batch in batches:
            self.queue.submit(batch)

    def after_transaction_end(self, session: Session, transaction: Any) -> None:
        # Runs after after_commit, so anything still pending was never committed.
        if transaction.parent is not None:
            return
        dropped = session.info.pop(PENDING_BATCHES, [])
        if dropped:
            log.info("transaction ended without commit: discarded %d callout batch(es)", len(dropped))

    def install(self) -> "CalloutHook":
        event.listen(self.target, "before_flush", self.before_flush)
        event.listen(self.target, "after_commit", self.after_commit)
        event.listen(self.target, "after_soft_rollback", self.after_soft_rollback)
        event.listen(self.target, "after_transaction_end", self.after_transaction_end)
        return self

    def uninstall(self) -> None:
        event.remove(self.target, "before_flush", self.before_flush)
        event.remove(self.target, "after_commit", self.after_commit)
        event.remove(self.target, "after_soft_rollback", self.after_soft_rollback)
        event.remove(self.target, "after_transaction_end", self.after_transaction_end)


def install_callout_hook(queue: JobQueue, dispatcher: ChangeDispatcher | None = None) -> CalloutHook:
    return CalloutHook(queue, dispatcher).install()
