# app/service_layer/use_cases/payloads.py
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.contacts import ContactRepository
from ...domain.errors import RecordNotFound
from ...domain.payloads import to_normalized_remote_payload


async def generate_payload(session: AsyncSession, contact_id: int) -> dict[str, Any]:
    """Normalized remote payload for a stored contact. Read-only."""
    contact = await ContactRepository(session).get(contact_id)
    if contact is None:
        raise RecordNotFound(f"contact {contact_id} does not exist")
    return to_normalized_remote_payload(contact)
