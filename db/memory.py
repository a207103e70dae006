"""In-process store used by tests and the demo mode.

Mirrors the SQLite repos: same ownership scoping, same ordering, and the same
UNIQUE(owner_user_id, domain) rule on company domains. Records are copied on
the way in and out so callers never share mutable state with the store.
"""
from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from db.errors import UniqueViolation
from models import (
    BusinessCard,
    Company,
    CompanyDomain,
    Conference,
    ConferenceRecap,
    ConferenceSession,
    Contact,
    ContactMeeting,
    Meeting,
    Note,
)
from ports import Repos


class MemoryContactsRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, Contact] = {}

    def get(self, user_id: str, contact_id: str) -> Optional[Contact]:
        row = self._rows.get(contact_id)
        return row.model_copy(deep=True) if row and row.user_id == user_id else None

    def save(self, contact: Contact) -> Contact:
        self._rows[contact.id] = contact.model_copy(deep=True)
        return contact

    def list_for_user(self, user_id: str) -> List[Contact]:
        rows = [r for r in self._rows.values() if r.user_id == user_id]
        return [r.model_copy(deep=True) for r in sorted(rows, key=lambda r: (r.full_name, r.created_at))]

    def list_for_company(self, user_id: str, company_id: str) -> List[Contact]:
        return [c for c in self.list_for_user(user_id) if c.company_id == company_id]


class MemoryCompaniesRepo:
    def __init__(self, domains: "MemoryCompanyDomainsRepo") -> None:
        self._rows: Dict[str, Company] = {}
        self._domains = domains

    def get(self, owner_user_id: str, company_id: str) -> Optional[Company]:
        row = self._rows.get(company_id)
        return row.model_copy(deep=True) if row and row.owner_user_id == owner_user_id else None

    def save(self, company: Company) -> Company:
        self._rows[company.id] = company.model_copy(deep=True)
        return company

    def delete(self, owner_user_id: str, company_id: str) -> None:
        row = self._rows.get(company_id)
        if row and row.owner_user_id == owner_user_id:
            del self._rows[company_id]
            self._domains.drop_company(company_id)

    def list_for_owner(self, owner_user_id: str) -> List[Company]:
        rows = [r for r in self._rows.values() if r.owner_user_id == owner_user_id]
        return [r.model_copy(deep=True) for r in sorted(rows, key=lambda r: (r.name, r.created_at))]


class MemoryCompanyDomainsRepo:
    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, str], CompanyDomain] = {}
        self._lock = threading.Lock()

    def find(self, owner_user_id: str, domain: str) -> Optional[CompanyDomain]:
        row = self._rows.get((owner_user_id, domain))
        return row.model_copy() if row else None

    def add(self, company_domain: CompanyDomain) -> CompanyDomain:
        key = (company_domain.owner_user_id, company_domain.domain)
        with self._lock:
            if key in self._rows:
                raise UniqueViolation("company_domains", key)
            self._rows[key] = company_domain.model_copy()
        return company_domain

    def list_for_company(self, owner_user_id: str, company_id: str) -> List[CompanyDomain]:
        return [
            r.model_copy()
            for r in self._rows.values()
            if r.owner_user_id == owner_user_id and r.company_id == company_id
        ]

    def drop_company(self, company_id: str) -> None:
        with self._lock:
            for key in [k for k, r in self._rows.items() if r.company_id == company_id]:
                del self._rows[key]


class MemoryNotesRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, Note] = {}

    def get_by_id(self, note_id: str) -> Optional[Note]:
        row = self._rows.get(note_id)
        return row.model_copy(deep=True) if row else None

    def get(self, user_id: str, note_id: str) -> Optional[Note]:
        row = self._rows.get(note_id)
        return row.model_copy(deep=True) if row and row.user_id == user_id else None

    def save(self, note: Note) -> Note:
        self._rows[note.id] = note.model_copy(deep=True)
        return note

    def list_for_user(self, user_id: str) -> List[Note]:
        rows = [r for r in self._rows.values() if r.user_id == user_id]
        return [r.model_copy(deep=True) for r in sorted(rows, key=lambda r: r.created_at, reverse=True)]


class MemoryCardsRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, BusinessCard] = {}

    def get(self, user_id: str, card_id: str) -> Optional[BusinessCard]:
        row = self._rows.get(card_id)
        return row.model_copy(deep=True) if row and row.user_id == user_id else None

    def save(self, card: BusinessCard) -> BusinessCard:
        self._rows[card.id] = card.model_copy(deep=True)
        return card


class MemoryMeetingsRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, Meeting] = {}
        self._links: Dict[Tuple[str, str], ContactMeeting] = {}

    def get(self, owner_user_id: str, meeting_id: str) -> Optional[Meeting]:
        row = self._rows.get(meeting_id)
        return row.model_copy() if row and row.owner_user_id == owner_user_id else None

    def save(self, meeting: Meeting) -> Meeting:
        self._rows[meeting.id] = meeting.model_copy()
        return meeting

    def link_contact(self, link: ContactMeeting) -> None:
        self._links[(link.contact_id, link.meeting_id)] = link.model_copy()

    def list_for_contact(self, owner_user_id: str, contact_id: str) -> List[Meeting]:
        ids = {l.meeting_id for l in self._links.values() if l.contact_id == contact_id}
        rows = [r for r in self._rows.values() if r.id in ids and r.owner_user_id == owner_user_id]
        return [r.model_copy() for r in sorted(rows, key=lambda r: r.happened_at, reverse=True)]


class MemoryConferencesRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, Conference] = {}

    def get(self, owner_user_id: str, conference_id: str) -> Optional[Conference]:
        row = self._rows.get(conference_id)
        return row.model_copy() if row and row.owner_user_id == owner_user_id else None

    def save(self, conference: Conference) -> Conference:
        self._rows[conference.id] = conference.model_copy()
        return conference

    def list_for_owner(self, owner_user_id: str) -> List[Conference]:
        rows = [r for r in self._rows.values() if r.owner_user_id == owner_user_id]
        return [r.model_copy() for r in sorted(rows, key=lambda r: r.created_at, reverse=True)]


class MemorySessionsRepo:
    def __init__(self) -> None:
        self._rows: List[ConferenceSession] = []

    def add(self, session: ConferenceSession) -> ConferenceSession:
        self._rows.append(session.model_copy())
        return session

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceSession]:
        rows = [r for r in self._rows if r.owner_user_id == owner_user_id and r.conference_id == conference_id]
        # sorted() is stable, so equal start times keep insertion order
        return [r.model_copy() for r in sorted(rows, key=lambda r: r.started_at)]

    def find_for_note(self, owner_user_id: str, conference_id: str, note_id: str) -> Optional[ConferenceSession]:
        for r in self._rows:
            if r.owner_user_id == owner_user_id and r.conference_id == conference_id and r.note_id == note_id:
                return r.model_copy()
        return None


class MemoryRecapsRepo:
    def __init__(self) -> None:
        self._rows: List[ConferenceRecap] = []

    def add(self, recap: ConferenceRecap) -> ConferenceRecap:
        self._rows.append(recap.model_copy())
        return recap

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceRecap]:
        return [
            r.model_copy()
            for r in self._rows
            if r.owner_user_id == owner_user_id and r.conference_id == conference_id
        ]


def build_memory_repos() -> Repos:
    domains = MemoryCompanyDomainsRepo()
    return Repos(
        contacts=MemoryContactsRepo(),
        companies=MemoryCompaniesRepo(domains),
        company_domains=domains,
        notes=MemoryNotesRepo(),
        cards=MemoryCardsRepo(),
        meetings=MemoryMeetingsRepo(),
        conferences=MemoryConferencesRepo(),
        sessions=MemorySessionsRepo(),
        recaps=MemoryRecapsRepo(),
    )
