from __future__ import annotations

import sqlite3

from db.memory import build_memory_repos
from db.repos.cards_repo import CardsRepo
from db.repos.companies_repo import CompaniesRepo, CompanyDomainsRepo
from db.repos.conferences_repo import ConferencesRepo, RecapsRepo, SessionsRepo
from db.repos.contacts_repo import ContactsRepo
from db.repos.meetings_repo import MeetingsRepo
from db.repos.notes_repo import NotesRepo
from ports import Repos


def build_sqlite_repos(conn: sqlite3.Connection) -> Repos:
    return Repos(
        contacts=ContactsRepo(conn),
        companies=CompaniesRepo(conn),
        company_domains=CompanyDomainsRepo(conn),
        notes=NotesRepo(conn),
        cards=CardsRepo(conn),
        meetings=MeetingsRepo(conn),
        conferences=ConferencesRepo(conn),
        sessions=SessionsRepo(conn),
        recaps=RecapsRepo(conn),
    )


__all__ = ["build_memory_repos", "build_sqlite_repos"]
