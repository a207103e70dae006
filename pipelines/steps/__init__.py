# Namespace for pipeline steps
from .note_steps import StartNoteProcessing, TranscribeNote, ApplyNoteResult  # noqa: F401
from .card_steps import ExtractCardFields, ApplyCardResult  # noqa: F401
