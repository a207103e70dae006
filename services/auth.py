from __future__ import annotations

import logging
from typing import Mapping, Optional

import requests

from config.settings import Settings
from services.errors import Unauthorized


logger = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise Unauthorized("Missing authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Invalid authorization header")
    return token.strip()


class StaticTokenVerifier:
    """Fixed token -> user id map from STATIC_TOKENS; for local runs and tests."""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self.tokens = dict(tokens)

    def verify(self, bearer_token: str) -> str:
        user_id = self.tokens.get(bearer_token)
        if not user_id:
            raise Unauthorized()
        return user_id


class SupabaseAuthVerifier:
    """Resolve a user JWT through the Supabase auth API (GET /auth/v1/user)."""

    def __init__(self, base_url: str, anon_key: Optional[str], timeout: float = 30.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def verify(self, bearer_token: str) -> str:
        headers = {"Authorization": f"Bearer {bearer_token}"}
        if self.anon_key:
            headers["apikey"] = self.anon_key
        try:
            resp = self.session.get(f"{self.base_url}/auth/v1/user", headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Auth provider unreachable", extra={"error": str(exc)})
            raise Unauthorized() from exc
        if resp.status_code != 200:
            raise Unauthorized()
        user_id = (resp.json() or {}).get("id")
        if not user_id:
            raise Unauthorized()
        return str(user_id)


def build_auth_verifier(settings: Settings):
    if settings.auth_backend == "supabase":
        return SupabaseAuthVerifier(settings.supabase_url or "", settings.supabase_anon_key, settings.http_timeout_seconds)
    if settings.auth_backend == "static":
        return StaticTokenVerifier(settings.static_tokens)
    raise RuntimeError(f"Unknown AUTH_BACKEND: {settings.auth_backend}")
