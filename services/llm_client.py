from __future__ import annotations

import json
import re
import time
from typing import Any, Dict, List, Optional

from config.ai_routes import ROUTES
from config.settings import Settings, get_settings
from utils.ai_trace import log_call, sha256_text


def extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Best-effort JSON object parse of a model reply (raw, fenced, or embedded)."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass
    m = re.search(r"```(?:json)?\n([\s\S]*?)\n```", text)
    if m:
        try:
            return json.loads(m.group(1))
        except ValueError:
            pass
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except ValueError:
            pass
    return None


def _usage(resp: Any) -> Optional[Dict[str, Any]]:
    usage = getattr(resp, "usage", None)
    if not usage:
        return None
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", None),
        "completion_tokens": getattr(usage, "completion_tokens", None),
        "total_tokens": getattr(usage, "total_tokens", None),
    }


class LLMClient:
    """Minimal wrapper to centralize per-use-case routing and call tracing."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None) -> None:
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self.settings.openai_api_key, timeout=self.settings.http_timeout_seconds)
        return self._client

    def chat(
        self,
        *,
        use_case: str,
        messages: List[Dict[str, Any]],
        record_id: Optional[str] = None,
        json_output: bool = True,
    ) -> str:
        route = ROUTES.get(use_case, {})
        model = route.get("model") or self.settings.openai_model
        kwargs: Dict[str, Any] = {"model": model, "messages": messages}
        # Only pass temperature if the route sets one (some models only accept default)
        if route.get("temperature") is not None:
            kwargs["temperature"] = route["temperature"]
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        t0 = time.time()
        try:
            resp = self.client.chat.completions.create(**kwargs)
        except Exception as exc:
            self._trace(use_case, model, record_id, messages, t0, status="error", error=str(exc))
            raise
        self._trace(use_case, model, record_id, messages, t0, usage=_usage(resp))
        return resp.choices[0].message.content or ""

    def transcribe(self, *, use_case: str, filename: str, data: bytes, record_id: Optional[str] = None) -> str:
        route = ROUTES.get(use_case, {})
        model = route.get("model") or self.settings.openai_transcription_model
        t0 = time.time()
        try:
            resp = self.client.audio.transcriptions.create(model=model, file=(filename, data))
        except Exception as exc:
            self._trace(use_case, model, record_id, None, t0, status="error", error=str(exc))
            raise
        self._trace(use_case, model, record_id, None, t0)
        return getattr(resp, "text", "") or ""

    def _trace(
        self,
        use_case: str,
        model: Optional[str],
        record_id: Optional[str],
        messages: Optional[List[Dict[str, Any]]],
        t0: float,
        *,
        status: str = "ok",
        error: Optional[str] = None,
        usage: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_call(
            engine=f"llm_client:{use_case}",
            provider="openai",
            model=model,
            operation=ROUTES.get(use_case, {}).get("operation", use_case),
            record_id=record_id,
            input_hash=sha256_text(json.dumps(messages, default=str)) if messages else None,
            duration_ms=int((time.time() - t0) * 1000),
            status=status,
            error=error,
            usage=usage,
        )
