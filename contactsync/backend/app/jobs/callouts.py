# app/jobs/callouts.py
from __future__ import annotations

import logging
from typing import Any

from ..adapters.clients.user_profile import UserProfileClient
from ..db import job_session
from ..domain.types import Batch, CalloutIntent, CalloutResult, ContactRef
from ..models import JobRun
from ..service_layer.use_cases.callouts import fetch_contact, push_contact
from ..services.jobruns import finish_job_fail, finish_job_success, start_job

log = logging.getLogger(__name__)


async def _run_one(intent: CalloutIntent, ref: ContactRef, client: UserProfileClient, session_factory) -> CalloutResult:
    async with job_session(session_factory) as session:
        if intent is CalloutIntent.fetch:
            if ref.external_id is None:
                return CalloutResult(ok=False, error="missing external_id")
            res = await fetch_contact(session, client, ref.external_id)
        elif intent is CalloutIntent.push:
            if ref.contact_id is None:
                return CalloutResult(ok=False, error="missing contact_id")
            res = await push_contact(session, client, ref.contact_id)
        else:
            return CalloutResult(ok=False, error=f"no callout for intent {intent.value}")

        await session.commit()
        return res


async def run_callout_batch(
    batch: Batch,
    client: UserProfileClient | None = None,
    session_factory=None,
) -> dict[str, Any]:
    """
    Deferred job body: one callout per ref, strictly in order.
    A failing record is logged and skipped; the rest of the batch still runs.
    """
    client = client or UserProfileClient()
    job_name = f"callouts_{batch.intent.value}"

    async with job_session(session_factory) as session:
        jr = await start_job(session, job_name)
        jr_id = jr.id
        await session.commit()

    ok = 0
    failed = 0
    for ref in batch.refs:
        try:
            res = await _run_one(batch.intent, ref, client, session_factory)
        except Exception as e:
            log.exception("%s: unexpected error for %s", job_name, ref)
            res = CalloutResult(ok=False, error=f"{type(e).__name__}: {e}")

        if res.ok:
            ok += 1
        else:
            failed += 1

    summary = {"intent": batch.intent.value, "total": len(batch), "ok": ok, "failed": failed}
    log.info("%s finished: %s", job_name, summary)

    async with job_session(session_factory) as session:
        jr = await session.get(JobRun, jr_id)
        if failed and not ok:
            await finish_job_fail(session, jr, RuntimeError(f"all {failed} callouts failed"), summary)
        else:
            await finish_job_success(session, jr, summary)
        await session.commit()

    return summary
