from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from models import Conference, ConferenceRecap, ConferenceSession, Contact, Meeting, Note, iso_utc, utc_now
from models.payloads import ConferencePayload, ConferenceRef, SessionPayload
from ports import BlobStorePort, Repos
from services.errors import UpstreamFailure
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)

DEFAULT_SESSION_TITLE = "Note Update"
SESSION_TITLE_MAX = 200


def session_title(summary: Optional[List[str]]) -> str:
    first = summary[0] if summary else ""
    return first[:SESSION_TITLE_MAX] or DEFAULT_SESSION_TITLE


def render_recap(conference: Conference, sessions: List[Dict[str, Any]]) -> str:
    """Plain-text recap of a conference.

    ``sessions`` are dicts with ``session``, ``contact`` and ``meeting`` keys,
    already ordered by start time.
    """
    lines = [
        f"CONFERENCE RECAP: {conference.name}",
        f"Location: {conference.location or 'N/A'}",
        f"Dates: {conference.start_date or 'N/A'} - {conference.end_date or 'N/A'}",
        "",
        f"Total Sessions: {len(sessions)}",
        "",
        "SESSIONS:",
        "",
    ]
    if not sessions:
        lines.append("No sessions recorded.")
    for index, entry in enumerate(sessions, start=1):
        session: ConferenceSession = entry["session"]
        contact: Optional[Contact] = entry.get("contact")
        meeting: Optional[Meeting] = entry.get("meeting")
        lines.append(f"{index}. {session.title or 'Untitled Session'}")
        lines.append(f"   Date: {session.started_at}")
        if contact is not None:
            who = f"   Contact: {contact.full_name}"
            if contact.company:
                who += f" ({contact.company})"
            lines.append(who)
        if meeting is not None and meeting.summary:
            lines.append(f"   Summary: {meeting.summary}")
        lines.append("")
    text = "\n".join(lines) + "\n"
    if conference.notes:
        text += f"\nNOTES:\n{conference.notes}\n"
    return text


class ConferencesService:
    def __init__(
        self,
        repos: Repos,
        guard: OwnershipGuard,
        blobs: BlobStorePort,
        *,
        recap_bucket: str = "conference_recaps",
        signed_url_ttl_seconds: int = 3600,
    ) -> None:
        self.repos = repos
        self.guard = guard
        self.blobs = blobs
        self.recap_bucket = recap_bucket
        self.signed_url_ttl_seconds = signed_url_ttl_seconds

    def create(self, user_id: str, payload: Any) -> Conference:
        data = require_valid(ConferencePayload, payload)
        fields = data.model_dump(mode="json")
        conference = Conference(owner_user_id=user_id, **fields)
        return self.repos.conferences.save(conference)

    def list(self, user_id: str) -> List[Conference]:
        return self.repos.conferences.list_for_owner(user_id)

    def get(self, user_id: str, payload: Any) -> Dict[str, Any]:
        conference_id = require_valid(ConferenceRef, payload).conference_id
        conference = self.guard.conference(user_id, conference_id)
        return {
            "conference": conference,
            "sessions": self.repos.sessions.list_for_conference(user_id, conference.id),
        }

    def add_session(self, user_id: str, payload: Any) -> ConferenceSession:
        """Record a session; every referenced id must belong to the caller."""
        data = require_valid(SessionPayload, payload)
        conference = self.guard.conference(user_id, data.conference_id)
        contact = self.guard.contact(user_id, data.contact_id) if data.contact_id else None
        meeting = self.guard.meeting(user_id, data.meeting_id) if data.meeting_id else None

        session = ConferenceSession(
            conference_id=conference.id,
            owner_user_id=user_id,
            contact_id=contact.id if contact else None,
            meeting_id=meeting.id if meeting else None,
            title=data.title,
            started_at=iso_utc(data.started_at) if data.started_at else utc_now(),
        )
        self.repos.sessions.add(session)
        logger.info("Conference session added", extra={"user_id": user_id, "op": "add_conference_session"})
        return session

    def link_note(self, user_id: str, conference: Conference, note: Note, summary: Optional[List[str]]) -> ConferenceSession:
        """Session for a note saved against a conference; one per (note, conference)."""
        existing = self.repos.sessions.find_for_note(user_id, conference.id, note.id)
        if existing is not None:
            return existing
        session = ConferenceSession(
            conference_id=conference.id,
            owner_user_id=user_id,
            contact_id=note.contact_id,
            note_id=note.id,
            title=session_title(summary),
        )
        return self.repos.sessions.add(session)

    def generate_recap(self, user_id: str, payload: Any) -> Dict[str, Any]:
        data = require_valid(ConferenceRef, payload)
        conference = self.guard.conference(user_id, data.conference_id)

        entries = []
        for session in self.repos.sessions.list_for_conference(user_id, conference.id):
            entries.append({
                "session": session,
                "contact": self.repos.contacts.get(user_id, session.contact_id) if session.contact_id else None,
                "meeting": self.repos.meetings.get(user_id, session.meeting_id) if session.meeting_id else None,
            })
        text = render_recap(conference, entries)

        path = f"{user_id}/conference-recap-{conference.id}-{int(time.time() * 1000)}.txt"
        blob_path = f"{self.recap_bucket}/{path}"
        try:
            self.blobs.put(blob_path, text.encode("utf-8"), "text/plain")
        except Exception as exc:
            logger.error("Recap upload failed", extra={"user_id": user_id, "op": "generate_recap", "error": str(exc)})
            raise UpstreamFailure("Failed to store recap") from exc

        recap = self.repos.recaps.add(
            ConferenceRecap(conference_id=conference.id, owner_user_id=user_id, storage_path=path)
        )
        try:
            download_url = self.blobs.get_signed_url(blob_path, self.signed_url_ttl_seconds)
        except Exception as exc:
            logger.error("Recap link signing failed", extra={"user_id": user_id, "op": "generate_recap", "error": str(exc)})
            raise UpstreamFailure("Failed to create download link") from exc
        logger.info("Conference recap generated", extra={"user_id": user_id, "op": "generate_recap"})
        return {"recap": recap, "download_url": download_url, "expires_in": self.signed_url_ttl_seconds}
