# app/domain/payloads.py
"""
Conversions between the local Contact and the remote user document.

Everything here is pure: no session, no network. The remote side looks like

    {
      "id": 42,
      "firstName": "Ada",
      "lastName": "Lovelace",
      "email": "ada@example.com",
      "phone": "+1 555 0100",
      "birthDate": "1990-01-01",
      "address": {"address": "1 Main", "city": "Springfield", "state": "IL",
                  "country": "US", "postalCode": "00000"}
    }
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..models import Contact
from .errors import MalformedDocument
from .parsing import default_if_blank

UNKNOWN = "Unknown"


class RemoteAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postalCode: str | None = None


class RemoteUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    firstName: str | None = None
    lastName: str | None = None
    email: str | None = None
    phone: str | None = None
    birthDate: date | None = None
    address: RemoteAddress | None = None

    @field_validator("birthDate", mode="before")
    @classmethod
    def _calendar_date(cls, v: Any) -> date | None:
        # Upstream is not always zero-padded ("1996-5-30").
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("birthDate must be a date string")
        head = v.strip().split("T")[0].split(" ")[0]
        parts = head.split("-")
        if len(parts) != 3:
            raise ValueError(f"unparseable birthDate: {v!r}")
        y, m, d = (int(p) for p in parts)
        return date(y, m, d)


def from_remote_json(document: Any) -> Contact:
    """
    Parse an untyped JSON document into a transient (unsaved) Contact.

    Missing keys leave the matching fields unset. Raises MalformedDocument when
    the document is not an object or a field has the wrong shape.
    """
    if not isinstance(document, Mapping):
        raise MalformedDocument(f"expected a JSON object, got {type(document).__name__}")

    try:
        user = RemoteUser.model_validate(dict(document))
    except ValidationError as e:
        raise MalformedDocument(str(e)) from e

    contact = Contact(
        first_name=user.firstName,
        last_name=user.lastName,
        email=user.email,
        phone=user.phone,
        birthdate=user.birthDate,
    )

    if user.address is not None:
        contact.mailing_street = user.address.address
        contact.mailing_city = user.address.city
        contact.mailing_state = user.address.state
        contact.mailing_country = user.address.country
        contact.mailing_postal_code = user.address.postalCode

    return contact


def _record_id(contact: Contact) -> str | None:
    return None if contact.id is None else str(contact.id)


def to_remote_payload(contact: Contact) -> dict[str, Any]:
    """Full-profile push body. Values go out as stored, no defaulting."""
    return {
        "id": _record_id(contact),
        "firstName": contact.first_name,
        "lastName": contact.last_name,
        "email": contact.email,
        "phone": contact.phone,
    }


def to_normalized_remote_payload(contact: Contact) -> dict[str, Any]:
    """Like to_remote_payload, but blank name/contact fields become "Unknown"."""
    return {
        "salesforceId": _record_id(contact),
        "firstName": default_if_blank(contact.first_name, UNKNOWN),
        "lastName": default_if_blank(contact.last_name, UNKNOWN),
        "email": default_if_blank(contact.email, UNKNOWN),
        "phone": default_if_blank(contact.phone, UNKNOWN),
    }
