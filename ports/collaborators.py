from __future__ import annotations

from typing import Any, Dict, Protocol


class AuthVerifierPort(Protocol):
    def verify(self, bearer_token: str) -> str:
        """Return the user id for a token; raise services.errors.Unauthorized otherwise."""
        ...


class BlobStorePort(Protocol):
    def put(self, path: str, data: bytes, content_type: str) -> str:
        ...

    def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        ...


class NoteEnginePort(Protocol):
    def transcribe_and_summarize(self, audio_url: str) -> Dict[str, Any]:
        """Return {transcript, summary: [..], next_step, tags: [..]}; may raise."""
        ...


class CardEnginePort(Protocol):
    def extract_card(self, image_url: str) -> Dict[str, Any]:
        """Return {ocr_text, extracted: {name?, company?, email?, phone?}, linkedin_guess?}; may raise."""
        ...
