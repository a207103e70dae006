from __future__ import annotations

import sqlite3
from typing import List, Optional

from db.repos._rows import upsert_row
from models import Conference, ConferenceRecap, ConferenceSession


class ConferencesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, owner_user_id: str, conference_id: str) -> Optional[Conference]:
        row = self.conn.execute(
            "SELECT * FROM conferences WHERE id = ? AND owner_user_id = ?;", (conference_id, owner_user_id)
        ).fetchone()
        return Conference(**dict(row)) if row else None

    def save(self, conference: Conference) -> Conference:
        upsert_row(self.conn, "conferences", conference.model_dump())
        return conference

    def list_for_owner(self, owner_user_id: str) -> List[Conference]:
        rows = self.conn.execute(
            "SELECT * FROM conferences WHERE owner_user_id = ? ORDER BY created_at DESC;", (owner_user_id,)
        ).fetchall()
        return [Conference(**dict(r)) for r in rows]


class SessionsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, session: ConferenceSession) -> ConferenceSession:
        upsert_row(self.conn, "conference_sessions", session.model_dump())
        return session

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceSession]:
        rows = self.conn.execute(
            "SELECT * FROM conference_sessions WHERE owner_user_id = ? AND conference_id = ? "
            "ORDER BY started_at ASC, created_at ASC;",
            (owner_user_id, conference_id),
        ).fetchall()
        return [ConferenceSession(**dict(r)) for r in rows]

    def find_for_note(self, owner_user_id: str, conference_id: str, note_id: str) -> Optional[ConferenceSession]:
        row = self.conn.execute(
            "SELECT * FROM conference_sessions WHERE owner_user_id = ? AND conference_id = ? AND note_id = ?;",
            (owner_user_id, conference_id, note_id),
        ).fetchone()
        return ConferenceSession(**dict(row)) if row else None


class RecapsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add(self, recap: ConferenceRecap) -> ConferenceRecap:
        upsert_row(self.conn, "conference_recaps", recap.model_dump())
        return recap

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceRecap]:
        rows = self.conn.execute(
            "SELECT * FROM conference_recaps WHERE owner_user_id = ? AND conference_id = ? ORDER BY generated_at;",
            (owner_user_id, conference_id),
        ).fetchall()
        return [ConferenceRecap(**dict(r)) for r in rows]
