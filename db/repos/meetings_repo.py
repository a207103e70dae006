from __future__ import annotations

import sqlite3
from typing import List, Optional

from db.repos._rows import upsert_row
from models import ContactMeeting, Meeting


class MeetingsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, owner_user_id: str, meeting_id: str) -> Optional[Meeting]:
        row = self.conn.execute(
            "SELECT * FROM meetings WHERE id = ? AND owner_user_id = ?;", (meeting_id, owner_user_id)
        ).fetchone()
        return Meeting(**dict(row)) if row else None

    def save(self, meeting: Meeting) -> Meeting:
        upsert_row(self.conn, "meetings", meeting.model_dump())
        return meeting

    def link_contact(self, link: ContactMeeting) -> None:
        """Attach a contact to a meeting; re-linking only updates the role."""
        self.conn.execute(
            "INSERT INTO contact_meetings (contact_id, meeting_id, role) VALUES (?, ?, ?) "
            "ON CONFLICT(contact_id, meeting_id) DO UPDATE SET role = excluded.role;",
            (link.contact_id, link.meeting_id, link.role),
        )
        self.conn.commit()

    def list_for_contact(self, owner_user_id: str, contact_id: str) -> List[Meeting]:
        rows = self.conn.execute(
            "SELECT m.* FROM meetings m JOIN contact_meetings cm ON cm.meeting_id = m.id "
            "WHERE m.owner_user_id = ? AND cm.contact_id = ? ORDER BY m.happened_at DESC;",
            (owner_user_id, contact_id),
        ).fetchall()
        return [Meeting(**dict(r)) for r in rows]
