from __future__ import annotations

import sqlite3
from typing import List, Optional

from db.repos._rows import upsert_row
from models import Contact


class ContactsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, user_id: str, contact_id: str) -> Optional[Contact]:
        row = self.conn.execute(
            "SELECT * FROM contacts WHERE id = ? AND user_id = ?;", (contact_id, user_id)
        ).fetchone()
        return Contact(**dict(row)) if row else None

    def save(self, contact: Contact) -> Contact:
        upsert_row(self.conn, "contacts", contact.model_dump())
        return contact

    def list_for_user(self, user_id: str) -> List[Contact]:
        rows = self.conn.execute(
            "SELECT * FROM contacts WHERE user_id = ? ORDER BY full_name, created_at;", (user_id,)
        ).fetchall()
        return [Contact(**dict(r)) for r in rows]

    def list_for_company(self, user_id: str, company_id: str) -> List[Contact]:
        rows = self.conn.execute(
            "SELECT * FROM contacts WHERE user_id = ? AND company_id = ? ORDER BY full_name, created_at;",
            (user_id, company_id),
        ).fetchall()
        return [Contact(**dict(r)) for r in rows]
