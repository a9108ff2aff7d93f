# app/adapters/repos/contacts.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import Contact

# Fields copied from a mapped remote contact onto the stored one.
SYNCED_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "birthdate",
    "mailing_street",
    "mailing_city",
    "mailing_state",
    "mailing_country",
    "mailing_postal_code",
)


class ContactRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, contact_id: int) -> Contact | None:
        return await self.session.get(Contact, contact_id)

    async def list_by_external_id(self, external_id: str) -> list[Contact]:
        q = select(Contact).where(Contact.external_id == external_id).order_by(Contact.id)
        return list((await self.session.execute(q)).scalars().all())

    async def get_by_external_id(self, external_id: str) -> Contact | None:
        matches = await self.list_by_external_id(external_id)
        return matches[0] if matches else None

    async def upsert(self, contact: Contact, external_id: str) -> tuple[Contact, bool]:
        """
        Insert-or-update by correlation key.

        Every stored contact carrying the key is updated (generated keys can
        collide); a new one is created only when none matches. Only fields that
        are set on `contact` overwrite the stored rows, so a remote document
        missing e.g. the address leaves the local address alone.

        Returns the lowest-id match and whether it was created.
        """
        matches = await self.list_by_external_id(external_id)

        was_created = False
        if not matches:
            created = Contact(external_id=external_id)
            self.session.add(created)
            matches = [created]
            was_created = True

        for existing in matches:
            for field in SYNCED_FIELDS:
                value = getattr(contact, field)
                if value is not None:
                    setattr(existing, field, value)

        await self.session.flush()
        return matches[0], was_created

    async def update(self, contact: Contact) -> None:
        contact.updated_at = datetime.utcnow()
        await self.session.flush()
