from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

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


# Every lookup takes the owner id first: rows are only visible to their owner.
# The one unscoped read is NotesRepoPort.get_by_id, used to tell "missing"
# apart from "someone else's" when a note is updated.


class ContactsRepoPort(Protocol):
    def get(self, user_id: str, contact_id: str) -> Optional[Contact]:
        ...

    def save(self, contact: Contact) -> Contact:
        ...

    def list_for_user(self, user_id: str) -> List[Contact]:
        ...

    def list_for_company(self, user_id: str, company_id: str) -> List[Contact]:
        ...


class CompaniesRepoPort(Protocol):
    def get(self, owner_user_id: str, company_id: str) -> Optional[Company]:
        ...

    def save(self, company: Company) -> Company:
        ...

    def delete(self, owner_user_id: str, company_id: str) -> None:
        ...

    def list_for_owner(self, owner_user_id: str) -> List[Company]:
        ...


class CompanyDomainsRepoPort(Protocol):
    def find(self, owner_user_id: str, domain: str) -> Optional[CompanyDomain]:
        ...

    def add(self, company_domain: CompanyDomain) -> CompanyDomain:
        """Insert; raises db.errors.UniqueViolation if (owner, domain) is taken."""
        ...

    def list_for_company(self, owner_user_id: str, company_id: str) -> List[CompanyDomain]:
        ...


class NotesRepoPort(Protocol):
    def get_by_id(self, note_id: str) -> Optional[Note]:
        ...

    def get(self, user_id: str, note_id: str) -> Optional[Note]:
        ...

    def save(self, note: Note) -> Note:
        ...

    def list_for_user(self, user_id: str) -> List[Note]:
        ...


class CardsRepoPort(Protocol):
    def get(self, user_id: str, card_id: str) -> Optional[BusinessCard]:
        ...

    def save(self, card: BusinessCard) -> BusinessCard:
        ...


class MeetingsRepoPort(Protocol):
    def get(self, owner_user_id: str, meeting_id: str) -> Optional[Meeting]:
        ...

    def save(self, meeting: Meeting) -> Meeting:
        ...

    def link_contact(self, link: ContactMeeting) -> None:
        ...

    def list_for_contact(self, owner_user_id: str, contact_id: str) -> List[Meeting]:
        ...


class ConferencesRepoPort(Protocol):
    def get(self, owner_user_id: str, conference_id: str) -> Optional[Conference]:
        ...

    def save(self, conference: Conference) -> Conference:
        ...

    def list_for_owner(self, owner_user_id: str) -> List[Conference]:
        ...


class SessionsRepoPort(Protocol):
    def add(self, session: ConferenceSession) -> ConferenceSession:
        ...

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceSession]:
        """Sessions ordered by started_at ascending."""
        ...

    def find_for_note(self, owner_user_id: str, conference_id: str, note_id: str) -> Optional[ConferenceSession]:
        ...


class RecapsRepoPort(Protocol):
    def add(self, recap: ConferenceRecap) -> ConferenceRecap:
        ...

    def list_for_conference(self, owner_user_id: str, conference_id: str) -> List[ConferenceRecap]:
        ...


@dataclass
class Repos:
    """The full set of repositories one store backend provides."""

    contacts: ContactsRepoPort
    companies: CompaniesRepoPort
    company_domains: CompanyDomainsRepoPort
    notes: NotesRepoPort
    cards: CardsRepoPort
    meetings: MeetingsRepoPort
    conferences: ConferencesRepoPort
    sessions: SessionsRepoPort
    recaps: RecapsRepoPort
