# app/service_layer/use_cases/callouts.py
"""
Fetch and Push, one record per call.

Both run outside the mutating transaction (from a deferred job or a manual
re-drive). Every CalloutError is caught here, logged and turned into a
CalloutResult; nothing from the taxonomy escapes to the job runner.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.clients.user_profile import UserProfileClient
from ...adapters.repos.contacts import ContactRepository
from ...domain.errors import CalloutError, RecordNotFound
from ...domain.payloads import from_remote_json, to_remote_payload
from ...domain.types import CalloutResult

log = logging.getLogger(__name__)


async def fetch_contact(session: AsyncSession, client: UserProfileClient, external_id: str) -> CalloutResult:
    """GET the remote user and upsert it locally by external_id."""
    try:
        document = await client.get_user(external_id)
        mapped = from_remote_json(document)
        mapped.external_id = external_id
        contact, created = await ContactRepository(session).upsert(mapped, external_id)
    except CalloutError as e:
        log.warning("fetch external_id=%s failed: %s: %s", external_id, type(e).__name__, e)
        return CalloutResult(ok=False, error=f"{type(e).__name__}: {e}")

    log.info("fetch external_id=%s ok (contact_id=%s created=%s)", external_id, contact.id, created)
    return CalloutResult(ok=True)


async def push_contact(session: AsyncSession, client: UserProfileClient, contact_id: int) -> CalloutResult:
    """POST the stored contact to the remote API and stamp last_synced_at on success."""
    repo = ContactRepository(session)
    try:
        contact = await repo.get(contact_id)
        if contact is None:
            raise RecordNotFound(f"contact {contact_id} does not exist")

        await client.add_user(to_remote_payload(contact))
    except CalloutError as e:
        log.warning("push contact_id=%s failed: %s: %s", contact_id, type(e).__name__, e)
        return CalloutResult(ok=False, error=f"{type(e).__name__}: {e}")

    contact.last_synced_at = datetime.utcnow()
    await repo.update(contact)
    log.info("push contact_id=%s ok", contact_id)
    return CalloutResult(ok=True)
