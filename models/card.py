from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from models.record import Record


class CardFields(BaseModel):
    """Structured guess extracted from a business card."""

    name: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None

    model_config = ConfigDict(extra="ignore")


class BusinessCard(Record):
    user_id: str
    image_url: str
    contact_id: str | None = None
    ocr_text: str | None = None
    extracted: CardFields | None = None
    linkedin_guess: str | None = None
    processed_at: str | None = None
