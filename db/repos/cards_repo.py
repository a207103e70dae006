from __future__ import annotations

import sqlite3
from typing import Optional

from db.repos._rows import dump_json, load_json, upsert_row
from models import BusinessCard


class CardsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, user_id: str, card_id: str) -> Optional[BusinessCard]:
        row = self.conn.execute(
            "SELECT * FROM business_cards WHERE id = ? AND user_id = ?;", (card_id, user_id)
        ).fetchone()
        if not row:
            return None
        data = dict(row)
        data["extracted"] = load_json(data.pop("extracted_json"))
        return BusinessCard(**data)

    def save(self, card: BusinessCard) -> BusinessCard:
        data = card.model_dump(mode="json")
        data["extracted_json"] = dump_json(data.pop("extracted"))
        upsert_row(self.conn, "business_cards", data)
        return card
