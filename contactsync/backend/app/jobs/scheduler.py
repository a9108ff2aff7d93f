# app/jobs/scheduler.py
from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler


def build_scheduler() -> AsyncIOScheduler:
    # No recurring jobs: everything here is a one-shot callout batch queued by the flush hook.
    return AsyncIOScheduler(job_defaults={"coalesce": False, "max_instances": 1})
