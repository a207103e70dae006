from __future__ import annotations

from models.record import Record


class Contact(Record):
    """App/DB record shape for a person the user has met."""

    user_id: str
    full_name: str
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    linkedin_url: str | None = None
    avatar_url: str | None = None
    title: str | None = None
    company_id: str | None = None
