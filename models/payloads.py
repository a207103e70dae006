"""Request payload schemas for every mutating operation.

Each schema describes the accepted input shape declaratively; ``services.validation``
turns a raw ``dict`` into either a typed payload or the full list of field errors.

Conventions shared by all schemas:

- strings are trimmed before any length or format rule runs;
- optional strings treat ``""`` as absent (stored as null);
- entity references are UUIDs.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, Any, List, Optional
from urllib.parse import urlparse
from uuid import UUID

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

from config.settings import DEFAULT_UPLOAD_URL_PATTERN
from models.note import NoteStatus
from models.record import iso_utc


PHONE_RE = re.compile(r"^[0-9\s\-+()]*$")
EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

MAX_PHOTOS = 10
MAX_TAGS = 20
MAX_SUMMARY_ITEMS = 10


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_RE.match(value):
        raise ValueError("Phone number contains invalid characters")
    return value


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not EMAIL_RE.match(value):
        raise ValueError("Invalid email address")
    return value


def is_web_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_web_url(value):
        raise ValueError("Invalid URL format")
    return value


def _check_linkedin(value: Optional[str]) -> Optional[str]:
    if value is not None and "linkedin.com" not in value:
        raise ValueError("Must be a valid LinkedIn URL")
    return value


def _upload_pattern(info: ValidationInfo) -> re.Pattern:
    pattern = (info.context or {}).get("upload_url_pattern") or DEFAULT_UPLOAD_URL_PATTERN
    return re.compile(pattern)


def _text(max_length: int):
    return Annotated[
        Optional[Annotated[str, StringConstraints(max_length=max_length)]],
        BeforeValidator(_blank_to_none),
    ]


def _required_text(max_length: int):
    return Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=1, max_length=max_length),
    ]


Text100 = _text(100)
Text200 = _text(200)
Text500 = _text(500)
Text5000 = _text(5000)
Text50000 = _text(50000)

Name100 = _required_text(100)
Name200 = _required_text(200)

Phone = Annotated[_text(20), AfterValidator(_check_phone)]
Email = Annotated[_text(255), AfterValidator(_check_email)]
Url = Annotated[_text(255), AfterValidator(_check_url)]
LongUrl = Annotated[_text(500), AfterValidator(_check_url)]
LinkedInUrl = Annotated[_text(255), AfterValidator(_check_url), AfterValidator(_check_linkedin)]

OptionalId = Annotated[Optional[UUID], BeforeValidator(_blank_to_none)]
OptionalDateTime = Annotated[Optional[datetime], BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
SummaryItem = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


class ContactPayload(BaseModel):
    id: OptionalId = None
    full_name: Name100
    company: Text100 = None
    email: Email = None
    phone: Phone = None
    linkedin_url: LinkedInUrl = None
    avatar_url: Url = None
    title: Text100 = None
    company_id: OptionalId = None

    model_config = ConfigDict(extra="ignore")


class CompanyPayload(BaseModel):
    id: OptionalId = None
    name: Name100
    domain: Text100 = None
    website_url: Url = None
    phone: Phone = None
    city: Text100 = None
    state: Text100 = None
    country: Text100 = None
    industry: Text100 = None
    linkedin_url: LinkedInUrl = None
    notes: Text5000 = None

    model_config = ConfigDict(extra="ignore")


class CreateNotePayload(BaseModel):
    audio_url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
    contact_id: OptionalId = None
    conference_id: OptionalId = None
    photo_urls: List[Annotated[str, StringConstraints(strip_whitespace=True)]] = Field(default_factory=list, max_length=MAX_PHOTOS)

    model_config = ConfigDict(extra="ignore")

    @field_validator("audio_url")
    @classmethod
    def _audio_matches_upload_path(cls, value: str, info: ValidationInfo) -> str:
        if not _upload_pattern(info).match(value):
            raise ValueError("Invalid audio_url format")
        return value

    @field_validator("photo_urls", mode="before")
    @classmethod
    def _photos_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("photo_urls")
    @classmethod
    def _photos_match_upload_path(cls, value: List[str], info: ValidationInfo) -> List[str]:
        pattern = _upload_pattern(info)
        for url in value:
            if not pattern.match(url):
                raise ValueError("Invalid photo_url format")
        return value


class UpdateNotePayload(BaseModel):
    """Partial note update; only the keys present in the request are applied."""

    note_id: UUID
    transcript: Text50000 = None
    summary: Optional[Annotated[List[SummaryItem], Field(max_length=MAX_SUMMARY_ITEMS)]] = None
    next_step: Text500 = None
    tags: Optional[Annotated[List[Tag], Field(max_length=MAX_TAGS)]] = None
    status: Optional[NoteStatus] = None
    conference_id: OptionalId = None
    due_date: OptionalDateTime = None

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually sent, minus the keys that are not note columns."""
        data = self.model_dump(exclude_unset=True, exclude={"note_id", "conference_id"})
        for key in ("summary", "tags"):
            if key in data and data[key] is None:
                data[key] = []
        if data.get("status", "") is None:
            del data["status"]
        if data.get("due_date") is not None:
            data["due_date"] = iso_utc(data["due_date"])
        return data


class NoteRef(BaseModel):
    note_id: UUID

    model_config = ConfigDict(extra="ignore")


class CardFieldsPayload(BaseModel):
    name: Text100 = None
    company: Text100 = None
    email: Email = None
    phone: Phone = None

    model_config = ConfigDict(extra="forbid")


class CreateCardPayload(BaseModel):
    image_url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]

    model_config = ConfigDict(extra="ignore")

    @field_validator("image_url")
    @classmethod
    def _image_is_upload_or_url(cls, value: str, info: ValidationInfo) -> str:
        if _upload_pattern(info).match(value) or is_web_url(value):
            return value
        raise ValueError("Invalid image_url format")


class ProcessCardPayload(BaseModel):
    card_id: UUID
    extracted: Optional[CardFieldsPayload] = None
    ocr_text: Text5000 = None
    linkedin_guess: LongUrl = None
    contact_id: OptionalId = None

    model_config = ConfigDict(extra="ignore")


class CardRef(BaseModel):
    card_id: UUID

    model_config = ConfigDict(extra="ignore")


class ConferencePayload(BaseModel):
    name: Name200
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    location: Text200 = None
    notes: Text5000 = None

    model_config = ConfigDict(extra="ignore")


class SessionPayload(BaseModel):
    conference_id: UUID
    contact_id: OptionalId = None
    meeting_id: OptionalId = None
    title: Text200 = None
    started_at: OptionalDateTime = None

    model_config = ConfigDict(extra="ignore")


class ConferenceRef(BaseModel):
    conference_id: UUID

    model_config = ConfigDict(extra="ignore")


class MeetingContactRef(BaseModel):
    contact_id: UUID
    role: Text100 = None

    model_config = ConfigDict(extra="ignore")


class MeetingPayload(BaseModel):
    happened_at: OptionalDateTime = None
    location: Text200 = None
    event: Text200 = None
    notes_raw: Text50000 = None
    summary: Text5000 = None
    contacts: List[MeetingContactRef] = Field(default_factory=list, max_length=50)

    model_config = ConfigDict(extra="ignore")


class CompanyRef(BaseModel):
    company_id: UUID

    model_config = ConfigDict(extra="ignore")


class ContactRef(BaseModel):
    contact_id: UUID

    model_config = ConfigDict(extra="ignore")
