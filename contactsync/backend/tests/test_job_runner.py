import asyncio
import json

import pytest
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import select

from app.config import settings
from app.domain.types import Batch, CalloutIntent, ContactRef
from app.jobs.callouts import run_callout_batch
from app.jobs.queue import SchedulerJobQueue
from app.models import Contact, JobRun, JobRunStatus


def _fetch_batch(*keys):
    return Batch(intent=CalloutIntent.fetch, refs=tuple(ContactRef(contact_id=None, external_id=k) for k in keys))


@pytest.mark.asyncio
async def test_fetch_batch_continues_past_failed_records(async_session_maker, user_api, user_client):
    user_api.users["1"] = {"firstName": "One", "email": "one@x.com"}
    user_api.users["3"] = {"firstName": "Three", "email": "three@x.com"}
    user_api.unreachable.add("4")

    summary = await run_callout_batch(_fetch_batch("1", "2", "3", "4"), client=user_client, session_factory=async_session_maker)

    assert summary == {"intent": "fetch", "total": 4, "ok": 2, "failed": 2}
    assert [r.url.path for r in user_api.requests] == ["/users/1", "/users/2", "/users/3", "/users/4"]

    async with async_session_maker() as session:
        rows = (await session.execute(select(Contact).order_by(Contact.external_id))).scalars().all()
        assert [(c.external_id, c.first_name) for c in rows] == [("1", "One"), ("3", "Three")]

        jr = (await session.execute(select(JobRun))).scalars().one()
        assert jr.job_name == "callouts_fetch"
        assert jr.status == JobRunStatus.success
        assert jr.finished_at is not None
        assert json.loads(jr.summary_json)["failed"] == 2


@pytest.mark.asyncio
async def test_push_batch_stamps_each_contact(async_session_maker, user_api, user_client):
    async with async_session_maker() as session:
        a = Contact(external_id="150", last_name="A")
        b = Contact(external_id="151", last_name="B")
        session.add_all([a, b])
        await session.commit()
        refs = (
            ContactRef(contact_id=a.id, external_id="150"),
            ContactRef(contact_id=999, external_id="152"),
            ContactRef(contact_id=b.id, external_id="151"),
        )

    summary = await run_callout_batch(
        Batch(intent=CalloutIntent.push, refs=refs), client=user_client, session_factory=async_session_maker
    )

    assert summary == {"intent": "push", "total": 3, "ok": 2, "failed": 1}
    async with async_session_maker() as session:
        rows = (await session.execute(select(Contact))).scalars().all()
        assert all(c.last_synced_at is not None for c in rows)


@pytest.mark.asyncio
async def test_unexpected_error_does_not_abort_batch(async_session_maker, user_api, user_client):
    user_api.users["2"] = {"email": "two@x.com"}

    class ExplodingOnFirst:
        def __init__(self, inner):
            self.inner = inner
            self.calls = 0

        async def get_user(self, external_id):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("kaboom")
            return await self.inner.get_user(external_id)

    client = ExplodingOnFirst(user_client)
    summary = await run_callout_batch(_fetch_batch("1", "2"), client=client, session_factory=async_session_maker)

    assert summary["ok"] == 1
    assert summary["failed"] == 1
    async with async_session_maker() as session:
        assert (await session.execute(select(Contact.external_id))).scalars().all() == ["2"]


@pytest.mark.asyncio
async def test_all_failed_batch_marks_job_run_failed(async_session_maker, user_client):
    await run_callout_batch(_fetch_batch("8", "9"), client=user_client, session_factory=async_session_maker)

    async with async_session_maker() as session:
        jr = (await session.execute(select(JobRun))).scalars().one()
        assert jr.status == JobRunStatus.failed
        assert "2 callouts failed" in jr.error


def test_scheduler_queue_submits_one_shot_job(user_client):
    scheduler = AsyncIOScheduler()
    queue = SchedulerJobQueue(scheduler, client=user_client, misfire_grace_s=30)
    batch = _fetch_batch("5")

    job = queue.submit(batch)

    assert job.id.startswith("callouts-fetch-")
    assert job.args == (batch,)
    assert job.kwargs["client"] is user_client
    assert job.func is run_callout_batch
    assert [j.id for j in scheduler.get_jobs()] == [job.id]


def test_scheduler_queue_misfire_grace():
    scheduler = AsyncIOScheduler()

    assert SchedulerJobQueue(scheduler).misfire_grace_s == settings.JOB_MISFIRE_GRACE_S
    assert SchedulerJobQueue(scheduler, misfire_grace_s=45).misfire_grace_s == 45

    unlimited = SchedulerJobQueue(scheduler, misfire_grace_s=0)
    assert unlimited.misfire_grace_s is None
    job = unlimited.submit(_fetch_batch("5"))
    assert job.misfire_grace_time is None


@pytest.mark.asyncio
async def test_submitted_batch_runs_on_started_scheduler(async_session_maker, user_api, user_client):
    user_api.users["5"] = {"firstName": "Five", "email": "five@x.com"}

    done = asyncio.Event()
    events = []

    def _on_job(event):
        events.append(event)
        done.set()

    scheduler = AsyncIOScheduler()
    scheduler.add_listener(_on_job, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    scheduler.start()
    try:
        queue = SchedulerJobQueue(scheduler, client=user_client, session_factory=async_session_maker)
        job = queue.submit(_fetch_batch("5", "6"))
        await asyncio.wait_for(done.wait(), timeout=5)
    finally:
        scheduler.shutdown(wait=False)

    (event,) = events
    assert event.job_id == job.id
    assert event.exception is None
    assert event.retval == {"intent": "fetch", "total": 2, "ok": 1, "failed": 1}

    async with async_session_maker() as session:
        c = (await session.execute(select(Contact))).scalars().one()
        assert (c.external_id, c.first_name) == ("5", "Five")
        assert (await session.execute(select(JobRun))).scalars().one().status == JobRunStatus.success
