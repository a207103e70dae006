from __future__ import annotations


class UniqueViolation(Exception):
    """A write collided with a unique constraint in the store."""

    def __init__(self, table: str, key: tuple) -> None:
        super().__init__(f"unique constraint violated on {table} for {key!r}")
        self.table = table
        self.key = key
