from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


# Mock capture paths ("/mock-audio-1700000000000.mp3", "/mock-photo-1700000000000-0.jpg")
# plus per-user paths written by the upload client ("/uploads/<uuid>/<name>.<ext>").
DEFAULT_UPLOAD_URL_PATTERN = (
    r"^/(?:mock-(?:audio|photo|card)-\d+(?:-\d+)?\.(?:mp3|jpg)"
    r"|uploads/[0-9a-fA-F-]{36}/[\w.-]+\.(?:mp3|m4a|wav|webm|jpg|jpeg|png))$"
)


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_tokens(raw: str | None) -> dict[str, str]:
    """Parse "token1:user1,token2:user2" into a mapping."""
    tokens: dict[str, str] = {}
    for pair in (raw or "").split(","):
        pair = pair.strip()
        if not pair or ":" not in pair:
            continue
        token, user_id = pair.split(":", 1)
        tokens[token.strip()] = user_id.strip()
    return tokens


@dataclass(frozen=True)
class Settings:
    run_env: str
    log_level: str

    # Relational store
    db_path: str
    store_backend: str  # sqlite | memory

    # Blob store
    blob_backend: str  # memory | local | supabase
    blob_dir: str
    blob_signing_secret: str
    recap_bucket: str
    signed_url_ttl_seconds: int

    # Capture uploads
    upload_url_pattern: str

    # Auth
    auth_backend: str  # static | supabase
    static_tokens: dict[str, str]
    supabase_url: str | None
    supabase_anon_key: str | None
    supabase_service_role_key: str | None

    # AI gating
    ai_enabled: bool
    ai_provider: str  # stub | openai
    openai_api_key: str | None
    openai_model: str
    openai_transcription_model: str

    http_timeout_seconds: int

    # Tracing of AI calls
    ai_trace: bool = False
    ai_trace_path: str = "logs/ai_calls.jsonl"

    # Feature flags
    demo: bool = False

    @property
    def stub_ai_allowed(self) -> bool:
        return self.run_env.lower() == "test" or self.demo


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    run_env = os.getenv("RUN_ENV", "local")
    demo = _as_bool(os.getenv("DEMO"))
    ai_enabled = _as_bool(os.getenv("AI_ENABLED"))
    ai_provider = os.getenv("AI_PROVIDER", "stub").lower()
    openai_api_key = os.getenv("OPENAI_API_KEY")
    auth_backend = os.getenv("AUTH_BACKEND", "static").lower()
    blob_backend = os.getenv("BLOB_BACKEND", "local").lower()
    supabase_url = os.getenv("SUPABASE_URL")

    if ai_enabled and ai_provider == "openai" and not openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY required when AI_PROVIDER=openai and AI_ENABLED=true"
        )
    if (auth_backend == "supabase" or blob_backend == "supabase") and not supabase_url:
        raise RuntimeError("SUPABASE_URL required for the supabase auth/blob backends")

    return Settings(
        run_env=run_env,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        db_path=os.getenv("DB_PATH", "capture.db"),
        store_backend=os.getenv("STORE_BACKEND", "sqlite").lower(),
        blob_backend=blob_backend,
        blob_dir=os.getenv("BLOB_DIR", "blobs"),
        blob_signing_secret=os.getenv("BLOB_SIGNING_SECRET", "dev-secret"),
        recap_bucket=os.getenv("RECAP_BUCKET", "conference_recaps"),
        signed_url_ttl_seconds=int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600")),
        upload_url_pattern=os.getenv("UPLOAD_URL_PATTERN", DEFAULT_UPLOAD_URL_PATTERN),
        auth_backend=auth_backend,
        static_tokens=_parse_tokens(os.getenv("STATIC_TOKENS")),
        supabase_url=supabase_url,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        ai_enabled=ai_enabled,
        ai_provider=ai_provider,
        openai_api_key=openai_api_key,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_transcription_model=os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1"),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        ai_trace=_as_bool(os.getenv("AI_TRACE")),
        ai_trace_path=os.getenv("AI_TRACE_PATH", "logs/ai_calls.jsonl"),
        demo=demo,
    )
