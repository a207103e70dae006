from __future__ import annotations

import os


# Central routing for AI use-cases. Edit here to change per-operation defaults.
# Per-route models can be overridden via env vars for quick testing.
#
# Keys are use_case identifiers consumed by services/ai_engines.py
ROUTES: dict[str, dict] = {
    # Speech to text for captured voice memos
    "note_transcription": {
        "model": os.getenv("OPENAI_MODEL_TRANSCRIPTION"),  # falls back to OPENAI_TRANSCRIPTION_MODEL
        "operation": "audio.transcriptions.create",
    },
    # Transcript -> summary bullets, next step and tags (JSON output)
    "note_summary": {
        "model": os.getenv("OPENAI_MODEL_SUMMARY"),  # falls back to OPENAI_MODEL
        "temperature": 0.2,
        "operation": "note_summary",
    },
    # Business card image -> OCR text and structured fields
    "card_extraction": {
        "model": os.getenv("OPENAI_MODEL_CARD"),
        "temperature": 0,
        "operation": "card_extraction",
    },
}
