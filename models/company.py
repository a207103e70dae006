from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from models.record import Record, new_id, utc_now


class Company(Record):
    """App/DB record shape: one canonical organization per owner."""

    owner_user_id: str
    name: str
    domain: str | None = None
    website_url: str | None = None
    phone: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    industry: str | None = None
    linkedin_url: str | None = None
    notes: str | None = None


class CompanyDomain(BaseModel):
    """Normalized domain owned by a company; unique per (owner_user_id, domain)."""

    id: str = Field(default_factory=new_id)
    company_id: str
    domain: str
    owner_user_id: str
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(extra="ignore")
