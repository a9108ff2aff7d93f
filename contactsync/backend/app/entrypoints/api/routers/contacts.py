# app/entrypoints/api/routers/contacts.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_user_client
from ....adapters.clients.user_profile import UserProfileClient
from ....adapters.repos.contacts import ContactRepository
from ....db import get_session, job_session
from ....domain.errors import RecordNotFound
from ....models import Contact
from ....schemas import CalloutResultOut, ContactCreate, ContactOut, ContactUpdate
from ....service_layer.use_cases.callouts import fetch_contact, push_contact
from ....service_layer.use_cases.payloads import generate_payload

router = APIRouter(tags=["contacts"])


@router.post("/contacts", response_model=ContactOut, status_code=201)
async def create_contact(body: ContactCreate, session: AsyncSession = Depends(get_session)) -> Contact:
    contact = Contact(**body.model_dump())
    session.add(contact)
    await session.commit()
    await session.refresh(contact)
    return contact


@router.get("/contacts/{contact_id}", response_model=ContactOut)
async def get_contact(contact_id: int, session: AsyncSession = Depends(get_session)) -> Contact:
    contact = await ContactRepository(session).get(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.patch("/contacts/{contact_id}", response_model=ContactOut)
async def update_contact(
    contact_id: int,
    body: ContactUpdate,
    session: AsyncSession = Depends(get_session),
) -> Contact:
    contact = await ContactRepository(session).get(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")

    for k, v in body.model_dump(exclude_unset=True).items():
        setattr(contact, k, v)

    await session.commit()
    await session.refresh(contact)
    return contact


@router.get("/contacts/{contact_id}/payload")
async def contact_payload(contact_id: int, session: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    try:
        return await generate_payload(session, contact_id)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Contact not found")


# Manual re-drive. Runs in a job session so the write-back does not queue another callout.
@router.post("/contacts/{contact_id}/push", response_model=CalloutResultOut)
async def redrive_push(
    contact_id: int,
    client: UserProfileClient = Depends(get_user_client),
) -> CalloutResultOut:
    async with job_session() as session:
        res = await push_contact(session, client, contact_id)
        await session.commit()
    return CalloutResultOut(ok=res.ok, error=res.error)


@router.post("/contacts/fetch/{external_id}", response_model=CalloutResultOut)
async def redrive_fetch(
    external_id: str,
    client: UserProfileClient = Depends(get_user_client),
) -> CalloutResultOut:
    if not external_id.isdigit():
        raise HTTPException(status_code=422, detail="external_id must be a non-negative integer")
    async with job_session() as session:
        res = await fetch_contact(session, client, external_id)
        await session.commit()
    return CalloutResultOut(ok=res.ok, error=res.error)
