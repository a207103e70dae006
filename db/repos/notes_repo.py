from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from db.repos._rows import dump_json, load_json, upsert_row
from models import Note


def _to_row(note: Note) -> Dict[str, Any]:
    data = note.model_dump(mode="json")
    for key in ("photo_urls", "summary", "tags"):
        data[f"{key}_json"] = dump_json(data.pop(key) or [])
    return data


def _from_row(row: sqlite3.Row) -> Note:
    data = dict(row)
    for key in ("photo_urls", "summary", "tags"):
        data[key] = load_json(data.pop(f"{key}_json"), default=[])
    return Note(**data)


class NotesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_by_id(self, note_id: str) -> Optional[Note]:
        row = self.conn.execute("SELECT * FROM notes WHERE id = ?;", (note_id,)).fetchone()
        return _from_row(row) if row else None

    def get(self, user_id: str, note_id: str) -> Optional[Note]:
        row = self.conn.execute(
            "SELECT * FROM notes WHERE id = ? AND user_id = ?;", (note_id, user_id)
        ).fetchone()
        return _from_row(row) if row else None

    def save(self, note: Note) -> Note:
        upsert_row(self.conn, "notes", _to_row(note))
        return note

    def list_for_user(self, user_id: str) -> List[Note]:
        rows = self.conn.execute(
            "SELECT * FROM notes WHERE user_id = ? ORDER BY created_at DESC;", (user_id,)
        ).fetchall()
        return [_from_row(r) for r in rows]
