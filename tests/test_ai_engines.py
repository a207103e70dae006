from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
import requests

from config.settings import get_settings
from services.ai_engines import (
    DisabledEngine,
    EngineUnavailable,
    OpenAICardEngine,
    OpenAINoteEngine,
    StubCardEngine,
    StubNoteEngine,
    build_card_engine,
    build_note_engine,
)
from services.blob_store import SupabaseBlobStore
from services.llm_client import LLMClient


class _FakeOpenAI:
    """Just enough of the OpenAI client surface: chat completions and transcriptions."""

    def __init__(self, replies=(), transcript="", transcribe_error=None):
        self.replies = list(replies)
        self.transcript = transcript
        self.transcribe_error = transcribe_error
        self.chat_calls = []
        self.transcribe_calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))

    def _chat(self, **kwargs):
        self.chat_calls.append(kwargs)
        message = SimpleNamespace(content=self.replies.pop(0))
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)

    def _transcribe(self, **kwargs):
        self.transcribe_calls.append(kwargs)
        if self.transcribe_error:
            raise self.transcribe_error
        return SimpleNamespace(text=self.transcript)


def _llm(fake):
    return LLMClient(settings=get_settings(), client=fake)


def test_llm_client_transcribe_sends_file_tuple():
    fake = _FakeOpenAI(transcript="hello there")
    text = _llm(fake).transcribe(use_case="note_transcription", filename="memo.mp3", data=b"RIFF")
    assert text == "hello there"
    (call,) = fake.transcribe_calls
    assert call["file"] == ("memo.mp3", b"RIFF")
    assert call["model"]


def test_llm_client_transcribe_propagates_errors():
    fake = _FakeOpenAI(transcribe_error=TimeoutError("slow"))
    with pytest.raises(TimeoutError):
        _llm(fake).transcribe(use_case="note_transcription", filename="memo.mp3", data=b"")


def test_openai_note_engine_transcribes_then_summarizes():
    fake = _FakeOpenAI(
        transcript="Met Jane, wants a demo.",
        replies=['```json\n{"summary": ["Wants a demo"], "next_step": "Book demo", "tags": ["demo"]}\n```'],
    )
    fetched = []

    def fetch(url):
        fetched.append(url)
        return b"audio-bytes"

    engine = OpenAINoteEngine(_llm(fake), fetch)
    result = engine.transcribe_and_summarize("/uploads/11111111-1111-4111-8111-111111111111/memo.m4a")

    assert fetched == ["/uploads/11111111-1111-4111-8111-111111111111/memo.m4a"]
    assert fake.transcribe_calls[0]["file"] == ("memo.m4a", b"audio-bytes")
    assert fake.chat_calls[0]["messages"][1]["content"] == "Met Jane, wants a demo."
    assert result == {
        "transcript": "Met Jane, wants a demo.",
        "summary": ["Wants a demo"],
        "next_step": "Book demo",
        "tags": ["demo"],
    }


def test_openai_note_engine_rejects_non_json_reply():
    fake = _FakeOpenAI(transcript="t", replies=["Sorry, I can't help with that."])
    engine = OpenAINoteEngine(_llm(fake), lambda url: b"")
    with pytest.raises(ValueError, match="no JSON object"):
        engine.transcribe_and_summarize("/mock-audio-1.mp3")


def test_openai_card_engine_inlines_local_images():
    reply = json.dumps({
        "ocr_text": "Jane Doe\nAcme",
        "extracted": {"name": "Jane Doe", "company": "Acme", "email": None, "phone": None},
        "linkedin_guess": None,
    })
    fake = _FakeOpenAI(replies=[reply])
    engine = OpenAICardEngine(_llm(fake), lambda url: b"img")

    result = engine.extract_card("/uploads/11111111-1111-4111-8111-111111111111/card.png")
    image = fake.chat_calls[0]["messages"][1]["content"][0]["image_url"]["url"]
    assert image == "data:image/png;base64,aW1n"
    assert result["extracted"]["name"] == "Jane Doe"
    assert result["ocr_text"] == "Jane Doe\nAcme"


def test_openai_card_engine_passes_web_urls_through():
    fake = _FakeOpenAI(replies=['{"ocr_text": "x", "extracted": null, "linkedin_guess": null}'])

    def fetch(url):
        raise AssertionError("web images are not downloaded")

    result = OpenAICardEngine(_llm(fake), fetch).extract_card("https://cdn.example.com/card.jpg")
    image = fake.chat_calls[0]["messages"][1]["content"][0]["image_url"]["url"]
    assert image == "https://cdn.example.com/card.jpg"
    assert result["extracted"] == {}


def test_openai_card_engine_rejects_non_json_reply():
    fake = _FakeOpenAI(replies=["no idea"])
    with pytest.raises(ValueError, match="no JSON object"):
        OpenAICardEngine(_llm(fake), lambda url: b"").extract_card("https://cdn.example.com/card.jpg")


@pytest.fixture
def local_env(monkeypatch):
    monkeypatch.setenv("RUN_ENV", "local")
    monkeypatch.delenv("DEMO", raising=False)
    monkeypatch.setenv("AI_ENABLED", "false")
    monkeypatch.setenv("AI_PROVIDER", "stub")
    get_settings.cache_clear()


def test_stub_engines_are_refused_outside_test_and_demo(local_env):
    note_engine = build_note_engine(get_settings())
    card_engine = build_card_engine(get_settings())
    assert isinstance(note_engine, DisabledEngine)
    assert isinstance(card_engine, DisabledEngine)
    with pytest.raises(EngineUnavailable):
        note_engine.transcribe_and_summarize("/mock-audio-1.mp3")
    with pytest.raises(EngineUnavailable):
        card_engine.extract_card("/mock-card-1.jpg")


def test_demo_mode_allows_stub_engines(local_env, monkeypatch):
    monkeypatch.setenv("DEMO", "true")
    get_settings.cache_clear()
    assert isinstance(build_note_engine(get_settings()), StubNoteEngine)
    assert isinstance(build_card_engine(get_settings()), StubCardEngine)


def test_test_env_allows_stub_engines():
    assert isinstance(build_note_engine(get_settings()), StubNoteEngine)


def test_openai_engines_when_enabled(local_env, monkeypatch):
    monkeypatch.setenv("AI_ENABLED", "true")
    monkeypatch.setenv("AI_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    assert isinstance(build_note_engine(get_settings()), OpenAINoteEngine)
    assert isinstance(build_card_engine(get_settings()), OpenAICardEngine)


def test_unknown_provider_is_disabled(local_env, monkeypatch):
    monkeypatch.setenv("AI_PROVIDER", "mystery")
    get_settings.cache_clear()
    engine = build_note_engine(get_settings())
    assert isinstance(engine, DisabledEngine)
    assert engine.reason == "Unknown AI provider: mystery"


class _StorageResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class _StorageSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.posts = []

    def post(self, url, data=None, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "data": data, "json": json, "headers": headers})
        return self.responses.pop(0)


def test_supabase_blob_store_uploads_and_signs():
    session = _StorageSession([
        _StorageResponse(200, {"Key": "conference_recaps/u/recap.txt"}),
        _StorageResponse(200, {"signedURL": "/object/sign/conference_recaps/u/recap.txt?token=abc"}),
    ])
    store = SupabaseBlobStore("https://proj.supabase.co/", "service-key", session=session)

    store.put("conference_recaps/u/recap.txt", b"recap", "text/plain")
    url = store.get_signed_url("conference_recaps/u/recap.txt", 3600)

    upload, sign = session.posts
    assert upload["url"] == "https://proj.supabase.co/storage/v1/object/conference_recaps/u/recap.txt"
    assert upload["data"] == b"recap"
    assert upload["headers"]["Authorization"] == "Bearer service-key"
    assert upload["headers"]["Content-Type"] == "text/plain"
    assert sign["url"] == "https://proj.supabase.co/storage/v1/object/sign/conference_recaps/u/recap.txt"
    assert sign["json"] == {"expiresIn": 3600}
    assert url == "https://proj.supabase.co/storage/v1/object/sign/conference_recaps/u/recap.txt?token=abc"


def test_supabase_blob_store_surfaces_http_errors():
    session = _StorageSession([_StorageResponse(400, {"error": "Duplicate"})])
    store = SupabaseBlobStore("https://proj.supabase.co", "service-key", session=session)
    with pytest.raises(requests.HTTPError):
        store.put("conference_recaps/u/recap.txt", b"recap", "text/plain")
