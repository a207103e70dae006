from __future__ import annotations

import sqlite3
from typing import List, Optional

from db.errors import UniqueViolation
from db.repos._rows import upsert_row
from models import Company, CompanyDomain


class CompaniesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, owner_user_id: str, company_id: str) -> Optional[Company]:
        row = self.conn.execute(
            "SELECT * FROM companies WHERE id = ? AND owner_user_id = ?;", (company_id, owner_user_id)
        ).fetchone()
        return Company(**dict(row)) if row else None

    def save(self, company: Company) -> Company:
        upsert_row(self.conn, "companies", company.model_dump())
        return company

    def delete(self, owner_user_id: str, company_id: str) -> None:
        """Remove a company; its domain rows go with it (ON DELETE CASCADE)."""
        self.conn.execute(
            "DELETE FROM companies WHERE id = ? AND owner_user_id = ?;", (company_id, owner_user_id)
        )
        self.conn.commit()

    def list_for_owner(self, owner_user_id: str) -> List[Company]:
        rows = self.conn.execute(
            "SELECT * FROM companies WHERE owner_user_id = ? ORDER BY name, created_at;", (owner_user_id,)
        ).fetchall()
        return [Company(**dict(r)) for r in rows]


class CompanyDomainsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find(self, owner_user_id: str, domain: str) -> Optional[CompanyDomain]:
        row = self.conn.execute(
            "SELECT * FROM company_domains WHERE owner_user_id = ? AND domain = ?;", (owner_user_id, domain)
        ).fetchone()
        return CompanyDomain(**dict(row)) if row else None

    def add(self, company_domain: CompanyDomain) -> CompanyDomain:
        """Insert a domain row, relying on UNIQUE(owner_user_id, domain) to settle races."""
        data = company_domain.model_dump()
        try:
            self.conn.execute(
                "INSERT INTO company_domains (id, company_id, domain, owner_user_id, created_at) VALUES (?, ?, ?, ?, ?);",
                (data["id"], data["company_id"], data["domain"], data["owner_user_id"], data["created_at"]),
            )
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            if "UNIQUE" in str(exc):
                raise UniqueViolation("company_domains", (data["owner_user_id"], data["domain"])) from exc
            raise
        self.conn.commit()
        return company_domain

    def list_for_company(self, owner_user_id: str, company_id: str) -> List[CompanyDomain]:
        rows = self.conn.execute(
            "SELECT * FROM company_domains WHERE owner_user_id = ? AND company_id = ? ORDER BY created_at;",
            (owner_user_id, company_id),
        ).fetchall()
        return [CompanyDomain(**dict(r)) for r in rows]
