from __future__ import annotations

import logging
from typing import Any

from models import Note
from models.payloads import NoteRef
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import ApplyNoteResult, StartNoteProcessing, TranscribeNote
from ports import NoteEnginePort
from services.errors import UpstreamFailure
from services.note_lifecycle import NotesService
from services.validation import require_valid


logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Processing failed - please try again"


def process_note(notes: NotesService, engine: NoteEnginePort, user_id: str, payload: Any) -> Note:
    """Run the AI step for a note and store its output.

    Lookup and the move into ``processing`` fail like any other request. Once
    the engine is involved, any failure marks the note ``error`` and surfaces
    only a generic UpstreamFailure; the cause goes to the log.
    """
    data = require_valid(NoteRef, payload)
    ctx = RunContext(user_id=user_id, record_id=str(data.note_id))
    ctx = StartNoteProcessing(notes).run(ctx)

    try:
        ctx = Pipeline([TranscribeNote(engine), ApplyNoteResult(notes)]).run(ctx)
    except Exception as exc:
        logger.error(
            "Note processing failed",
            exc_info=True,
            extra={"user_id": user_id, "op": "process_note", "error": str(exc)},
        )
        notes.mark_error(user_id, ctx.record_id)
        raise UpstreamFailure(FAILURE_MESSAGE) from exc
    return ctx.record
