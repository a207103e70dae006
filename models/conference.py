from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from models.record import Record, new_id, utc_now


class Conference(Record):
    owner_user_id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None
    location: str | None = None
    notes: str | None = None


class ConferenceSession(BaseModel):
    """One contact interaction within a conference.

    ``note_id`` is set when the session was created from a note update and is
    used to keep a single session per (note, conference).
    """

    id: str = Field(default_factory=new_id)
    conference_id: str
    owner_user_id: str
    contact_id: str | None = None
    meeting_id: str | None = None
    note_id: str | None = None
    title: str | None = None
    started_at: str = Field(default_factory=utc_now)
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(extra="ignore")


class ConferenceRecap(BaseModel):
    id: str = Field(default_factory=new_id)
    conference_id: str
    owner_user_id: str
    storage_path: str
    generated_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(extra="ignore")
