"""Operation dispatch: the request surface for every handler.

``dispatch(operation, payload, authorization)`` resolves the bearer
credential to a user id, runs the named operation and turns the outcome into
a ``Response``. Service errors map to their status and ``{error, details?}``
body; anything unexpected is logged with its traceback and reported as 500.
"""
from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from config.settings import Settings, get_settings
from db.connection import get_connection
from db.schema import bootstrap
from db.stores import build_memory_repos, build_sqlite_repos
from pipelines.extract_card import extract_card
from pipelines.process_note import process_note
from ports import AuthVerifierPort, BlobStorePort, CardEnginePort, NoteEnginePort, Repos
from services.ai_engines import build_card_engine, build_note_engine
from services.auth import bearer_token, build_auth_verifier
from services.blob_store import build_blob_store
from services.cards import CardsService
from services.companies import CompaniesService
from services.company_linker import CompanyLinker
from services.conferences import ConferencesService
from services.contacts import ContactsService
from services.errors import ServiceError
from services.meetings import MeetingsService
from services.note_lifecycle import NotesService
from services.ownership import OwnershipGuard
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)

Operation = Callable[[str, Any], Dict[str, Any]]


@dataclass
class Response:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def _ref(payload: Any, key: str) -> Any:
    # Read operations accept either {"<key>": id} or the bare id
    if isinstance(payload, str):
        return {key: payload}
    return payload


class App:
    """Wires services to one store, auth verifier, blob store and AI engines."""

    def __init__(
        self,
        repos: Repos,
        auth: AuthVerifierPort,
        blobs: BlobStorePort,
        note_engine: NoteEnginePort,
        card_engine: CardEnginePort,
        *,
        upload_url_pattern: Optional[str] = None,
        recap_bucket: str = "conference_recaps",
        signed_url_ttl_seconds: int = 3600,
    ) -> None:
        self.repos = repos
        self.auth = auth
        self.blobs = blobs
        self.note_engine = note_engine
        self.card_engine = card_engine

        guard = OwnershipGuard(repos)
        linker = CompanyLinker(repos)
        self.companies = CompaniesService(repos, guard, linker)
        self.contacts = ContactsService(repos, guard, linker)
        self.conferences = ConferencesService(
            repos, guard, blobs, recap_bucket=recap_bucket, signed_url_ttl_seconds=signed_url_ttl_seconds
        )
        self.notes = NotesService(repos, guard, self.conferences, upload_url_pattern=upload_url_pattern)
        self.cards = CardsService(repos, guard, upload_url_pattern=upload_url_pattern)
        self.meetings = MeetingsService(repos, guard)

        self.operations: Dict[str, Operation] = {
            "upsert_company": lambda uid, p: {"company": self.companies.upsert(uid, p)},
            "list_companies": lambda uid, p: {"companies": self.companies.list(uid)},
            "get_company": lambda uid, p: self.companies.get(uid, _ref(p, "company_id")),
            "upsert_contact": lambda uid, p: {"contact": self.contacts.upsert(uid, p)},
            "list_contacts": lambda uid, p: {"contacts": self.contacts.list(uid)},
            "get_contact": lambda uid, p: self.contacts.get(uid, _ref(p, "contact_id")),
            "create_note": lambda uid, p: {"note": self.notes.create(uid, p)},
            "update_note": lambda uid, p: {"note": self.notes.update(uid, p)},
            "process_note": lambda uid, p: {"note": process_note(self.notes, self.note_engine, uid, _ref(p, "note_id"))},
            "get_note": lambda uid, p: {"note": self.notes.get(uid, _ref(p, "note_id"))},
            "list_notes": lambda uid, p: {"notes": self.notes.list(uid)},
            "create_card": lambda uid, p: {"card": self.cards.create(uid, p)},
            "process_card": lambda uid, p: {"card": self.cards.process(uid, p)},
            "extract_card": lambda uid, p: {"card": extract_card(self.cards, self.card_engine, uid, _ref(p, "card_id"))},
            "create_meeting": lambda uid, p: self.meetings.create(uid, p),
            "create_conference": lambda uid, p: {"conference": self.conferences.create(uid, p)},
            "list_conferences": lambda uid, p: {"conferences": self.conferences.list(uid)},
            "get_conference": lambda uid, p: self.conferences.get(uid, _ref(p, "conference_id")),
            "add_conference_session": lambda uid, p: {"session": self.conferences.add_session(uid, p)},
            "generate_recap": lambda uid, p: self.conferences.generate_recap(uid, _ref(p, "conference_id")),
        }

    def dispatch(self, operation: str, payload: Any, authorization: Optional[str]) -> Response:
        handler = self.operations.get(operation)
        if handler is None:
            return Response(404, {"error": "Unknown operation"})

        t0 = time.time()
        user_id: Optional[str] = None
        try:
            user_id = self.auth.verify(bearer_token(authorization))
            body = handler(user_id, payload if payload is not None else {})
            response = Response(200, to_jsonable(body))
        except ServiceError as exc:
            response = Response(exc.status, exc.body())
        except Exception as exc:
            logger.exception(
                "Unhandled error",
                extra={"op": operation, "user_id": user_id or "-", "error": str(exc)},
            )
            response = Response(500, {"error": "Internal server error"})

        logger.info(
            "request",
            extra={
                "op": operation,
                "user_id": user_id or "-",
                "status": response.status,
                "duration_ms": int((time.time() - t0) * 1000),
                "error": response.body.get("error", "-"),
            },
        )
        return response


def build_repos(settings: Settings, conn: Optional[sqlite3.Connection] = None) -> Repos:
    if settings.store_backend == "memory":
        return build_memory_repos()
    if settings.store_backend == "sqlite":
        conn = conn or get_connection(settings.db_path)
        bootstrap(conn)
        return build_sqlite_repos(conn)
    raise RuntimeError(f"Unknown STORE_BACKEND: {settings.store_backend}")


def build_app(settings: Optional[Settings] = None, *, repos: Optional[Repos] = None) -> App:
    settings = settings or get_settings()
    init_logging(settings.log_level)
    return App(
        repos or build_repos(settings),
        build_auth_verifier(settings),
        build_blob_store(settings),
        build_note_engine(settings),
        build_card_engine(settings),
        upload_url_pattern=settings.upload_url_pattern,
        recap_bucket=settings.recap_bucket,
        signed_url_ttl_seconds=settings.signed_url_ttl_seconds,
    )


@lru_cache(maxsize=1)
def get_app() -> App:
    return build_app()


def dispatch(operation: str, payload: Any, authorization: Optional[str]) -> Response:
    return get_app().dispatch(operation, payload, authorization)
