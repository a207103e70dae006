from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from config.settings import get_settings


logger = logging.getLogger(__name__)


def sha256_text(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def log_call(
    *,
    engine: str,
    provider: str,
    model: Optional[str],
    operation: str,
    record_id: Optional[str] = None,
    input_hash: Optional[str] = None,
    duration_ms: Optional[int] = None,
    status: str = "ok",
    error: Optional[str] = None,
    usage: Optional[Dict[str, Any]] = None,
) -> None:
    """Append a single JSON line describing an AI engine call if tracing is enabled.

    Controlled by AI_TRACE / AI_TRACE_PATH in config/settings.py. The record id
    (note or card) is kept so a failed call can be matched to the row that was
    marked as errored.
    """
    settings = get_settings()
    if not settings.ai_trace:
        return

    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "engine": engine,
        "provider": provider,
        "model": model,
        "operation": operation,
        "record_id": record_id,
        "input_hash": input_hash,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
        "usage": usage or {},
    }

    log_path = Path(settings.ai_trace_path)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as exc:
        # Tracing must never break a request
        logger.warning("AI trace write failed", extra={"error": str(exc)})
