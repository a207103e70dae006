from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from models.record import Record, utc_now


class Meeting(Record):
    owner_user_id: str
    happened_at: str = Field(default_factory=utc_now)
    location: str | None = None
    event: str | None = None
    notes_raw: str | None = None
    summary: str | None = None


class ContactMeeting(BaseModel):
    """Join row between contacts and meetings, with the contact's role."""

    contact_id: str
    meeting_id: str
    role: str | None = None

    model_config = ConfigDict(extra="ignore")
