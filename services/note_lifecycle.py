"""Note status state machine plus the create and update paths for notes.

A note is created in ``processing`` with placeholder content while the AI
step runs out of band; results and later user edits come back through
``NotesService.update``, which is the only place a status changes.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Optional
from uuid import UUID

from models import Conference, Note, NoteStatus
from models.payloads import CreateNotePayload, NoteRef, UpdateNotePayload
from ports import Repos
from services.conferences import ConferencesService
from services.errors import Forbidden, NotFound, TransitionError
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)

TRANSITIONS: Dict[NoteStatus, FrozenSet[NoteStatus]] = {
    NoteStatus.DRAFT: frozenset({NoteStatus.PROCESSING, NoteStatus.ERROR}),
    NoteStatus.PROCESSING: frozenset({NoteStatus.READY, NoteStatus.ERROR}),
    NoteStatus.READY: frozenset({NoteStatus.PROCESSING, NoteStatus.ERROR}),
    NoteStatus.ERROR: frozenset({NoteStatus.PROCESSING, NoteStatus.DRAFT}),
}

PLACEHOLDER_TRANSCRIPT = "Processing..."
PLACEHOLDER_SUMMARY = ("Processing audio...",)
CONFERENCE_TAG_PREFIX = "conference:"


def can_transition(current: NoteStatus, requested: NoteStatus) -> bool:
    return NoteStatus(requested) in TRANSITIONS[NoteStatus(current)]


def check_transition(current: NoteStatus, requested: NoteStatus) -> None:
    if not can_transition(current, requested):
        raise TransitionError(NoteStatus(current).value, NoteStatus(requested).value)


def conference_tag(conference_id: str) -> str:
    return f"{CONFERENCE_TAG_PREFIX}{conference_id}"


def conference_from_tags(tags: List[str]) -> Optional[str]:
    """Conference id carried by a `conference:<uuid>` tag, if any."""
    for tag in tags or []:
        if not tag.startswith(CONFERENCE_TAG_PREFIX):
            continue
        try:
            return str(UUID(tag[len(CONFERENCE_TAG_PREFIX):]))
        except ValueError:
            continue
    return None


class NotesService:
    def __init__(
        self,
        repos: Repos,
        guard: OwnershipGuard,
        conferences: ConferencesService,
        *,
        upload_url_pattern: Optional[str] = None,
    ) -> None:
        self.repos = repos
        self.guard = guard
        self.conferences = conferences
        self.upload_url_pattern = upload_url_pattern

    def _context(self) -> Dict[str, Any]:
        return {"upload_url_pattern": self.upload_url_pattern} if self.upload_url_pattern else {}

    def create(self, user_id: str, payload: Any) -> Note:
        data = require_valid(CreateNotePayload, payload, context=self._context())
        contact = self.guard.contact(user_id, data.contact_id) if data.contact_id else None
        conference = self.guard.conference(user_id, data.conference_id) if data.conference_id else None

        note = Note(
            user_id=user_id,
            contact_id=contact.id if contact else None,
            audio_url=data.audio_url,
            photo_urls=list(data.photo_urls),
            transcript=PLACEHOLDER_TRANSCRIPT,
            summary=list(PLACEHOLDER_SUMMARY),
            # Correlates the note with its conference until a session exists
            tags=[conference_tag(conference.id)] if conference else [],
            status=NoteStatus.PROCESSING,
        )
        self.repos.notes.save(note)
        logger.info("Note created", extra={"user_id": user_id, "op": "create_note"})
        return note

    def update(self, user_id: str, payload: Any) -> Note:
        """Apply a partial update.

        The note is looked up by id alone so that a foreign note is a 403
        rather than a 404. A status change must follow TRANSITIONS. When an
        owned ``conference_id`` is given, a session is linked afterwards; that
        step never fails the update.
        """
        data = require_valid(UpdateNotePayload, payload)
        note = self.repos.notes.get_by_id(str(data.note_id))
        if note is None:
            raise NotFound("Note not found")
        if note.user_id != user_id:
            raise Forbidden("Access denied")

        changes = data.changes()
        if "status" in changes:
            check_transition(note.status, changes["status"])

        conference: Optional[Conference] = None
        if data.conference_id is not None:
            conference = self.repos.conferences.get(user_id, str(data.conference_id))
            if conference is None:
                logger.warning(
                    "Conference not owned; note saved without session",
                    extra={"user_id": user_id, "op": "update_note"},
                )

        updated = note.touched(**changes)
        self.repos.notes.save(updated)
        logger.info("Note updated", extra={"user_id": user_id, "op": "update_note", "status": updated.status.value})

        if conference is not None:
            self._link_session(user_id, conference, updated, data.summary)
        return updated

    def _link_session(self, user_id: str, conference: Conference, note: Note, summary: Optional[List[str]]) -> None:
        try:
            self.conferences.link_note(user_id, conference, note, summary)
        except Exception as exc:
            # Best-effort side effect; the note update already stands
            logger.warning(
                "Conference session link failed",
                extra={"user_id": user_id, "op": "update_note", "error": str(exc)},
            )

    def get(self, user_id: str, payload: Any) -> Note:
        data = require_valid(NoteRef, payload)
        return self.guard.note(user_id, data.note_id)

    def list(self, user_id: str) -> List[Note]:
        return self.repos.notes.list_for_user(user_id)

    def mark_error(self, user_id: str, note_id: str) -> Optional[Note]:
        """Move a note to ``error`` if the table allows it from its current status."""
        note = self.repos.notes.get(user_id, note_id)
        if note is None or not can_transition(note.status, NoteStatus.ERROR):
            return note
        failed = note.touched(status=NoteStatus.ERROR)
        self.repos.notes.save(failed)
        return failed
