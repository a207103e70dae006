from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, as stored in every row."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def iso_utc(value: datetime) -> str:
    """Format a datetime like ``utc_now``; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")


class Record(BaseModel):
    """Common row shape: string UUID id plus creation/update timestamps."""

    id: str = Field(default_factory=new_id)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(extra="ignore")

    def touched(self, **changes) -> "Record":
        """Return a copy with ``changes`` applied and ``updated_at`` refreshed."""
        return self.model_copy(update={**changes, "updated_at": utc_now()})
