from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, Optional


def upsert_row(conn: sqlite3.Connection, table: str, row: Dict[str, Any]) -> None:
    """Insert ``row`` or overwrite every column of the existing row with the same id."""
    cols = list(row)
    placeholders = ", ".join("?" for _ in cols)
    updates = ", ".join(f"{c} = excluded.{c}" for c in cols if c != "id")
    sql = (
        f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({placeholders}) "
        f"ON CONFLICT(id) DO UPDATE SET {updates};"
    )
    conn.execute(sql, tuple(row[c] for c in cols))
    conn.commit()


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    # Preserve non-ASCII characters in stored JSON text
    return json.dumps(value, ensure_ascii=False)


def load_json(text: Optional[str], default: Any = None) -> Any:
    if text is None or text == "":
        return default
    return json.loads(text)
