"""Blob stores for generated artifacts (conference recaps).

Paths are "<bucket>/<key>". Local and in-memory stores hand out HMAC-signed
download links that expire after the requested TTL; the Supabase store asks
the storage API to sign them.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qs, quote, urlparse

import requests

from config.settings import Settings


logger = logging.getLogger(__name__)


class _HmacSigner:
    def __init__(self, secret: str, base_url: str) -> None:
        self.secret = secret.encode("utf-8")
        self.base_url = base_url.rstrip("/")

    def _signature(self, path: str, expires: int) -> str:
        return hmac.new(self.secret, f"{path}:{expires}".encode("utf-8"), hashlib.sha256).hexdigest()

    def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        expires = int(time.time()) + int(ttl_seconds)
        return f"{self.base_url}/{quote(path)}?expires={expires}&signature={self._signature(path, expires)}"

    def verify_signed_url(self, url: str, now: Optional[float] = None) -> bool:
        parsed = urlparse(url)
        prefix = urlparse(self.base_url).path.rstrip("/") + "/"
        if not parsed.path.startswith(prefix):
            return False
        path = parsed.path[len(prefix):]
        params = parse_qs(parsed.query)
        try:
            expires = int(params["expires"][0])
            signature = params["signature"][0]
        except (KeyError, IndexError, ValueError):
            return False
        if expires < (now if now is not None else time.time()):
            return False
        return hmac.compare_digest(signature, self._signature(path, expires))


class MemoryBlobStore(_HmacSigner):
    def __init__(self, secret: str = "test-secret", base_url: str = "memory://blobs") -> None:
        super().__init__(secret, base_url)
        self.objects: Dict[str, Tuple[bytes, str]] = {}

    def put(self, path: str, data: bytes, content_type: str) -> str:
        self.objects[path] = (bytes(data), content_type)
        return f"{self.base_url}/{quote(path)}"


class LocalBlobStore(_HmacSigner):
    """Files under BLOB_DIR; links point at a static file route (/blobs/...)."""

    def __init__(self, root: str, secret: str, base_url: str = "/blobs") -> None:
        super().__init__(secret, base_url)
        self.root = Path(root)

    def put(self, path: str, data: bytes, content_type: str) -> str:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return f"{self.base_url}/{quote(path)}"


class SupabaseBlobStore:
    """Supabase Storage REST API, authenticated with the service role key."""

    def __init__(self, base_url: str, service_key: Optional[str], timeout: float = 30.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key or ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, **extra: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.service_key}", "apikey": self.service_key, **extra}

    def put(self, path: str, data: bytes, content_type: str) -> str:
        resp = self.session.post(
            f"{self.base_url}/storage/v1/object/{quote(path)}",
            data=data,
            headers=self._headers(**{"Content-Type": content_type, "x-upsert": "false"}),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return f"{self.base_url}/storage/v1/object/{quote(path)}"

    def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        resp = self.session.post(
            f"{self.base_url}/storage/v1/object/sign/{quote(path)}",
            json={"expiresIn": int(ttl_seconds)},
            headers=self._headers(),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        signed = (resp.json() or {}).get("signedURL") or ""
        return f"{self.base_url}/storage/v1{signed}"


def build_blob_store(settings: Settings):
    if settings.blob_backend == "memory":
        return MemoryBlobStore(settings.blob_signing_secret)
    if settings.blob_backend == "local":
        return LocalBlobStore(settings.blob_dir, settings.blob_signing_secret)
    if settings.blob_backend == "supabase":
        return SupabaseBlobStore(settings.supabase_url or "", settings.supabase_service_role_key, settings.http_timeout_seconds)
    raise RuntimeError(f"Unknown BLOB_BACKEND: {settings.blob_backend}")
