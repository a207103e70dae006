"""Transcription/summary and business-card extraction engines.

Both are treated as fallible black boxes by the pipelines: whatever they
raise marks the owning record as failed. ``build_note_engine`` and
``build_card_engine`` pick the implementation from settings.
"""
from __future__ import annotations

import base64
import hashlib
import logging
import mimetypes
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests

from config.settings import Settings
from services.llm_client import LLMClient, extract_json
from utils.ai_trace import log_call, sha256_text


logger = logging.getLogger(__name__)

NOTE_SUMMARY_PROMPT = (
    "You turn a transcript of a short voice memo recorded after a business meeting into CRM notes. "
    "Return ONLY a JSON object with keys: summary (array of at most 5 short bullet strings), "
    "next_step (one sentence), tags (array of at most 5 short lowercase tags)."
)

CARD_EXTRACTION_PROMPT = (
    "Read this business card. Return ONLY a JSON object with keys: ocr_text (all text on the card, "
    "line by line), extracted (object with name, company, email, phone; null when absent), "
    "linkedin_guess (a https://linkedin.com/in/... URL if one can be inferred, else null)."
)


class EngineUnavailable(RuntimeError):
    """Raised when no AI provider is configured for this environment."""


def fetch_bytes(url: str, *, blob_dir: str, timeout: float) -> bytes:
    """Download ``url``, or read an upload path ("/uploads/...") from the local blob dir."""
    if url.startswith(("http://", "https://")):
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.content
    return (Path(blob_dir) / url.lstrip("/")).read_bytes()


def _pick(options: list, key: str) -> Any:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return options[digest[0] % len(options)]


class StubNoteEngine:
    """Canned results for tests and demo mode; the same URL always gets the same memo."""

    TRANSCRIPTS = [
        "Just had a great conversation about their upcoming product launch. They're looking to expand "
        "into new markets and need strategic partners. Budget approved for Q1. Very interested in our "
        "solution and want to move fast. Decision maker is on board.",
        "Coffee meeting went well. Discussed their current challenges with workflow automation. They're "
        "spending too much time on manual processes. Showed interest in our platform, especially the AI "
        "features. Want to see a demo next week.",
        "Met at the conference. They're frustrated with their current vendor and actively looking for "
        "alternatives. Contract expires in 60 days. Perfect timing for us. Need to send over case studies "
        "and pricing.",
    ]

    def transcribe_and_summarize(self, audio_url: str) -> Dict[str, Any]:
        transcript = _pick(self.TRANSCRIPTS, audio_url)
        log_call(engine="stub_note_engine", provider="stub", model=None, operation="transcribe_and_summarize",
                 input_hash=sha256_text(audio_url))
        return {
            "transcript": transcript,
            "summary": [
                "Productive conversation about product launch and market expansion",
                "Budget approved for Q1, decision maker is engaged",
                "Strong interest in our solution, ready to move quickly",
            ],
            "next_step": "Send follow-up email with case studies and schedule demo call",
            "tags": ["follow-up", "qualified", "hot-lead"],
        }


class StubCardEngine:
    NAMES = ["Jennifer Lee", "Marcus Johnson", "Priya Patel", "Tom Anderson"]
    COMPANIES = ["Stellar Inc", "CloudNext", "DataFlow Systems", "Apex Solutions"]

    def extract_card(self, image_url: str) -> Dict[str, Any]:
        name = _pick(self.NAMES, image_url)
        company = _pick(self.COMPANIES, image_url[::-1])
        first, last = (part.lower() for part in name.split(" ", 1))
        email = f"{first}.{last}@{company.lower().replace(' ', '')}.com"
        phone = f"+1-555-{1000 + int(sha256_text(image_url)[:4], 16) % 9000}"
        log_call(engine="stub_card_engine", provider="stub", model=None, operation="extract_card",
                 input_hash=sha256_text(image_url))
        return {
            "ocr_text": "\n".join([name, company, email, phone]),
            "extracted": {"name": name, "company": company, "email": email, "phone": phone},
            "linkedin_guess": f"https://linkedin.com/in/{first}{last}",
        }


class OpenAINoteEngine:
    def __init__(self, llm: LLMClient, fetch: Callable[[str], bytes]) -> None:
        self.llm = llm
        self.fetch = fetch

    def transcribe_and_summarize(self, audio_url: str) -> Dict[str, Any]:
        audio = self.fetch(audio_url)
        transcript = self.llm.transcribe(
            use_case="note_transcription", filename=Path(audio_url).name or "memo.mp3", data=audio
        )
        reply = self.llm.chat(
            use_case="note_summary",
            messages=[
                {"role": "system", "content": NOTE_SUMMARY_PROMPT},
                {"role": "user", "content": transcript},
            ],
        )
        parsed = extract_json(reply)
        if parsed is None:
            raise ValueError("summary model returned no JSON object")
        return {
            "transcript": transcript,
            "summary": parsed.get("summary") or [],
            "next_step": parsed.get("next_step"),
            "tags": parsed.get("tags") or [],
        }


class OpenAICardEngine:
    def __init__(self, llm: LLMClient, fetch: Callable[[str], bytes]) -> None:
        self.llm = llm
        self.fetch = fetch

    def _image_ref(self, image_url: str) -> str:
        if image_url.startswith(("http://", "https://")):
            return image_url
        mime = mimetypes.guess_type(image_url)[0] or "image/jpeg"
        encoded = base64.b64encode(self.fetch(image_url)).decode("ascii")
        return f"data:{mime};base64,{encoded}"

    def extract_card(self, image_url: str) -> Dict[str, Any]:
        reply = self.llm.chat(
            use_case="card_extraction",
            messages=[
                {"role": "system", "content": CARD_EXTRACTION_PROMPT},
                {"role": "user", "content": [{"type": "image_url", "image_url": {"url": self._image_ref(image_url)}}]},
            ],
        )
        parsed = extract_json(reply)
        if parsed is None:
            raise ValueError("card model returned no JSON object")
        return {
            "ocr_text": parsed.get("ocr_text"),
            "extracted": parsed.get("extracted") or {},
            "linkedin_guess": parsed.get("linkedin_guess"),
        }


class DisabledEngine:
    def __init__(self, reason: str) -> None:
        self.reason = reason

    def transcribe_and_summarize(self, audio_url: str) -> Dict[str, Any]:
        raise EngineUnavailable(self.reason)

    def extract_card(self, image_url: str) -> Dict[str, Any]:
        raise EngineUnavailable(self.reason)


def _engine_parts(settings: Settings) -> Optional[tuple]:
    if settings.ai_enabled and settings.ai_provider == "openai":
        llm = LLMClient(settings)

        def fetch(url: str) -> bytes:
            return fetch_bytes(url, blob_dir=settings.blob_dir, timeout=settings.http_timeout_seconds)

        return llm, fetch
    return None


def _disabled_reason(settings: Settings) -> str:
    if settings.ai_provider not in ("stub", "openai"):
        return f"Unknown AI provider: {settings.ai_provider}"
    return "AI processing is not enabled for this environment"


def build_note_engine(settings: Settings):
    parts = _engine_parts(settings)
    if parts:
        return OpenAINoteEngine(*parts)
    if settings.ai_provider == "stub" and settings.stub_ai_allowed:
        return StubNoteEngine()
    logger.warning("Note engine disabled", extra={"error": _disabled_reason(settings)})
    return DisabledEngine(_disabled_reason(settings))


def build_card_engine(settings: Settings):
    parts = _engine_parts(settings)
    if parts:
        return OpenAICardEngine(*parts)
    if settings.ai_provider == "stub" and settings.stub_ai_allowed:
        return StubCardEngine()
    logger.warning("Card engine disabled", extra={"error": _disabled_reason(settings)})
    return DisabledEngine(_disabled_reason(settings))
