# app/jobs/queue.py
from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..adapters.clients.user_profile import UserProfileClient
from ..config import settings
from ..domain.types import Batch
from .callouts import run_callout_batch

log = logging.getLogger(__name__)


class JobQueue(Protocol):
    def submit(self, batch: Batch) -> Any:
        ...


class SchedulerJobQueue:
    """
    Runs each submitted batch as a one-shot APScheduler job on the event loop.
    Submission never blocks; the job starts as soon as the scheduler gets to it.
    """

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        client: UserProfileClient | None = None,
        session_factory=None,
        misfire_grace_s: int | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.client = client
        self.session_factory = session_factory
        grace = settings.JOB_MISFIRE_GRACE_S if misfire_grace_s is None else misfire_grace_s
        # APScheduler takes a positive int, or None for no limit; 0 here means no limit.
        self.misfire_grace_s = grace if grace > 0 else None

    def submit(self, batch: Batch) -> Any:
        job = self.scheduler.add_job(
            run_callout_batch,
            "date",
            args=[batch],
            kwargs={"client": self.client, "session_factory": self.session_factory},
            id=f"callouts-{batch.intent.value}-{uuid4().hex}",
            misfire_grace_time=self.misfire_grace_s,
        )
        log.info("queued %s batch of %d as job %s", batch.intent.value, len(batch), job.id)
        return job
