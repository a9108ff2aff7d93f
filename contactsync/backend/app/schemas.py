from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime

from .models import JobRunStatus


class ContactBase(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birthdate: date | None = None

    mailing_street: str | None = None
    mailing_city: str | None = None
    mailing_state: str | None = None
    mailing_country: str | None = None
    mailing_postal_code: str | None = None


class ContactCreate(ContactBase):
    # leave empty to have one generated
    external_id: str | None = Field(None, pattern=r"^\d+$")


class ContactUpdate(ContactBase):
    external_id: str | None = Field(None, pattern=r"^\d+$")


class ContactOut(ContactBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str | None = None
    last_synced_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CalloutResultOut(BaseModel):
    ok: bool
    error: str | None = None


class JobRunOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_name: str
    status: JobRunStatus
    started_at: datetime
    finished_at: datetime | None = None
    error: str | None = None
    summary_json: str | None = None
