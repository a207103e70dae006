from __future__ import annotations

from enum import Enum

from pydantic import Field

from models.record import Record


class NoteStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class Note(Record):
    """App/DB record shape for a captured voice memo and its processed output."""

    user_id: str
    contact_id: str | None = None
    audio_url: str | None = None
    photo_urls: list[str] = Field(default_factory=list)
    transcript: str | None = None
    summary: list[str] = Field(default_factory=list)
    next_step: str | None = None
    tags: list[str] = Field(default_factory=list)
    due_date: str | None = None
    status: NoteStatus = NoteStatus.DRAFT
