from __future__ import annotations

import logging
import time
from typing import Any, List

from models import NoteStatus
from models.payloads import MAX_TAGS
from pipelines.runner import RunContext
from ports import NoteEnginePort
from services.note_lifecycle import NotesService, conference_from_tags


logger = logging.getLogger(__name__)


def merge_tags(existing: List[str], incoming: Any) -> List[Any]:
    """Existing tags first (they carry conference:<id>), then new ones, deduplicated."""
    merged: List[Any] = []
    for tag in list(existing or []) + list(incoming or []):
        key = tag.strip() if isinstance(tag, str) else tag
        if key == "" or key in merged:
            continue
        merged.append(key)
    return merged[:MAX_TAGS]


class StartNoteProcessing:
    """Load the caller's note and move it into ``processing`` unless it already is."""

    def __init__(self, notes: NotesService) -> None:
        self.notes = notes

    def run(self, ctx: RunContext) -> RunContext:
        note = self.notes.guard.note(ctx.user_id, ctx.record_id)
        if note.status != NoteStatus.PROCESSING:
            note = self.notes.update(ctx.user_id, {"note_id": note.id, "status": NoteStatus.PROCESSING.value})
        ctx.record = note
        return ctx


class TranscribeNote:
    def __init__(self, engine: NoteEnginePort) -> None:
        self.engine = engine

    def run(self, ctx: RunContext) -> RunContext:
        t0 = time.time()
        result = self.engine.transcribe_and_summarize(ctx.record.audio_url)
        if not isinstance(result, dict):
            raise ValueError("note engine returned a non-object result")
        ctx.result = result
        ctx.meta["engine_ms"] = int((time.time() - t0) * 1000)
        return ctx


class ApplyNoteResult:
    """Write engine output through the regular update path and mark the note ready.

    A note captured at a conference carries a `conference:<id>` tag; passing
    that id along links the note to a session for the conference.
    """

    def __init__(self, notes: NotesService) -> None:
        self.notes = notes

    def run(self, ctx: RunContext) -> RunContext:
        result = ctx.result
        payload = {
            "note_id": ctx.record.id,
            "transcript": result.get("transcript"),
            "summary": result.get("summary") or [],
            "next_step": result.get("next_step"),
            "tags": merge_tags(ctx.record.tags, result.get("tags")),
            "status": NoteStatus.READY.value,
        }
        conference_id = conference_from_tags(ctx.record.tags)
        if conference_id:
            payload["conference_id"] = conference_id
        ctx.record = self.notes.update(ctx.user_id, payload)
        logger.info(
            "Note processed",
            extra={"user_id": ctx.user_id, "op": "process_note", "duration_ms": ctx.meta.get("engine_ms")},
        )
        return ctx
