from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from config.settings import get_settings
from services.llm_client import LLMClient, extract_json
from utils.ai_trace import log_call


class _FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        usage = SimpleNamespace(prompt_tokens=12, completion_tokens=5, total_tokens=17)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def _fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def trace_path(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "ai_calls.jsonl"
    monkeypatch.setenv("AI_TRACE", "true")
    monkeypatch.setenv("AI_TRACE_PATH", str(path))
    get_settings.cache_clear()
    return path


def _lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_log_call_is_noop_when_disabled(tmp_path, monkeypatch):
    path = tmp_path / "trace.jsonl"
    monkeypatch.setenv("AI_TRACE", "false")
    monkeypatch.setenv("AI_TRACE_PATH", str(path))
    get_settings.cache_clear()
    log_call(engine="x", provider="stub", model=None, operation="op")
    assert not path.exists()


def test_log_call_appends_json_lines(trace_path):
    log_call(engine="note", provider="stub", model=None, operation="transcribe", record_id="n1")
    log_call(engine="note", provider="stub", model=None, operation="transcribe", status="error", error="boom")
    first, second = _lines(trace_path)
    assert first["record_id"] == "n1"
    assert first["status"] == "ok"
    assert second["status"] == "error"
    assert second["error"] == "boom"


def test_llm_client_chat_traces_usage(trace_path):
    completions = _FakeCompletions(content='{"ok": true}')
    client = LLMClient(settings=get_settings(), client=_fake_client(completions))

    reply = client.chat(use_case="note_summary", messages=[{"role": "user", "content": "hi"}], record_id="n1")
    assert extract_json(reply) == {"ok": True}
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert completions.kwargs["temperature"] == 0.2

    (entry,) = _lines(trace_path)
    assert entry["engine"] == "llm_client:note_summary"
    assert entry["usage"]["total_tokens"] == 17
    assert entry["input_hash"]


def test_llm_client_chat_traces_errors(trace_path):
    completions = _FakeCompletions(error=TimeoutError("read timed out"))
    client = LLMClient(settings=get_settings(), client=_fake_client(completions))

    with pytest.raises(TimeoutError):
        client.chat(use_case="card_extraction", messages=[{"role": "user", "content": "card"}])
    (entry,) = _lines(trace_path)
    assert entry["status"] == "error"
    assert "read timed out" in entry["error"]


@pytest.mark.parametrize(
    "text,expected",
    [
        ('{"a": 1}', {"a": 1}),
        ('```json\n{"a": 2}\n```', {"a": 2}),
        ('Here you go: {"a": 3} thanks', {"a": 3}),
        ("no json here", None),
        ("", None),
    ],
)
def test_extract_json(text, expected):
    assert extract_json(text) == expected
