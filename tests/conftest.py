from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


ALICE = "11111111-1111-4111-8111-111111111111"
BOB = "22222222-2222-4222-8222-222222222222"
TOKENS = {"tok-alice": ALICE, "tok-bob": BOB}


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.note_lifecycle'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    from config.settings import get_settings

    monkeypatch.setenv("RUN_ENV", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def repos():
    from db.memory import build_memory_repos

    return build_memory_repos()


@pytest.fixture
def blobs():
    from services.blob_store import MemoryBlobStore

    return MemoryBlobStore(secret="test-secret")


@pytest.fixture
def app(repos, blobs):
    from api.handlers import App
    from services.ai_engines import StubCardEngine, StubNoteEngine
    from services.auth import StaticTokenVerifier

    return App(repos, StaticTokenVerifier(TOKENS), blobs, StubNoteEngine(), StubCardEngine())


@pytest.fixture
def call(app):
    """dispatch() as Alice by default: call("create_note", {...}, token="tok-bob")."""

    def _call(operation, payload=None, token="tok-alice"):
        return app.dispatch(operation, payload, f"Bearer {token}" if token else None)

    return _call
