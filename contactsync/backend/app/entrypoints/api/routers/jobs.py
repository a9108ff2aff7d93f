# app/entrypoints/api/routers/jobs.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....db import get_session
from ....schemas import JobRunOut
from ....services.jobruns import recent_job_runs

router = APIRouter(tags=["jobs"])


@router.get("/jobs/runs", response_model=list[JobRunOut])
async def list_job_runs(
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> list[JobRunOut]:
    rows = await recent_job_runs(session, limit=limit)
    return [JobRunOut.model_validate(r) for r in rows]
