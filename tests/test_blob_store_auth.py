from __future__ import annotations

import time

import pytest
import requests

from services.auth import StaticTokenVerifier, SupabaseAuthVerifier, bearer_token
from services.blob_store import LocalBlobStore, MemoryBlobStore
from services.errors import Unauthorized


def test_signed_url_verifies_until_expiry():
    store = MemoryBlobStore(secret="s3cret")
    store.put("conference_recaps/u/recap.txt", b"hello", "text/plain")
    url = store.get_signed_url("conference_recaps/u/recap.txt", 60)

    assert url.startswith("memory://blobs/conference_recaps/u/recap.txt?")
    assert store.verify_signed_url(url)
    assert not store.verify_signed_url(url, now=time.time() + 120)
    assert not MemoryBlobStore(secret="other").verify_signed_url(url)
    assert not store.verify_signed_url(url.replace("recap.txt", "other.txt"))


def test_local_blob_store_writes_files(tmp_path):
    store = LocalBlobStore(str(tmp_path), secret="s3cret")
    store.put("conference_recaps/u/recap.txt", b"hello", "text/plain")
    assert (tmp_path / "conference_recaps" / "u" / "recap.txt").read_bytes() == b"hello"
    assert store.verify_signed_url(store.get_signed_url("conference_recaps/u/recap.txt", 60))


@pytest.mark.parametrize(
    "header,message",
    [
        (None, "Missing authorization header"),
        ("", "Missing authorization header"),
        ("Basic abc", "Invalid authorization header"),
        ("Bearer ", "Invalid authorization header"),
    ],
)
def test_bearer_token_rejects_bad_headers(header, message):
    with pytest.raises(Unauthorized) as exc:
        bearer_token(header)
    assert exc.value.message == message


def test_bearer_token_parses():
    assert bearer_token("Bearer abc.def") == "abc.def"
    assert bearer_token("bearer  xyz ") == "xyz"


def test_static_verifier():
    verifier = StaticTokenVerifier({"tok": "user-1"})
    assert verifier.verify("tok") == "user-1"
    with pytest.raises(Unauthorized):
        verifier.verify("other")


class _FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append((url, headers))
        if self.error:
            raise self.error
        return self.response


def test_supabase_verifier_resolves_user():
    session = _FakeSession(_FakeResponse(200, {"id": "user-9"}))
    verifier = SupabaseAuthVerifier("https://proj.supabase.co/", "anon", session=session)
    assert verifier.verify("jwt") == "user-9"
    url, headers = session.requests[0]
    assert url == "https://proj.supabase.co/auth/v1/user"
    assert headers == {"Authorization": "Bearer jwt", "apikey": "anon"}


@pytest.mark.parametrize(
    "session",
    [
        _FakeSession(_FakeResponse(401, {"msg": "bad jwt"})),
        _FakeSession(_FakeResponse(200, {})),
        _FakeSession(error=requests.ConnectionError("dns")),
    ],
)
def test_supabase_verifier_failures_are_unauthorized(session):
    with pytest.raises(Unauthorized):
        SupabaseAuthVerifier("https://proj.supabase.co", "anon", session=session).verify("jwt")
