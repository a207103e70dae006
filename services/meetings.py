from __future__ import annotations

import logging
from typing import Any, Dict

from models import ContactMeeting, Meeting, iso_utc
from models.payloads import MeetingPayload
from ports import Repos
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)


class MeetingsService:
    def __init__(self, repos: Repos, guard: OwnershipGuard) -> None:
        self.repos = repos
        self.guard = guard

    def create(self, user_id: str, payload: Any) -> Dict[str, Any]:
        data = require_valid(MeetingPayload, payload)
        # All attendees must be the caller's contacts before anything is written
        attendees = [(self.guard.contact(user_id, ref.contact_id), ref.role) for ref in data.contacts]

        fields = data.model_dump(exclude={"contacts", "happened_at"})
        meeting = Meeting(owner_user_id=user_id, **fields)
        if data.happened_at:
            meeting = meeting.model_copy(update={"happened_at": iso_utc(data.happened_at)})
        self.repos.meetings.save(meeting)

        links = []
        for contact, role in attendees:
            link = ContactMeeting(contact_id=contact.id, meeting_id=meeting.id, role=role)
            self.repos.meetings.link_contact(link)
            links.append(link)
        logger.info("Meeting created", extra={"user_id": user_id, "op": "create_meeting"})
        return {"meeting": meeting, "contacts": links}
