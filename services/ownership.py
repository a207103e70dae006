from __future__ import annotations

from typing import Callable, Optional, TypeVar

from models import BusinessCard, Company, Conference, Contact, Meeting, Note
from ports import Repos
from services.errors import NotFound


T = TypeVar("T")


def _require(label: str, lookup: Callable[[str, str], Optional[T]], user_id: str, entity_id: object) -> T:
    # Absent and foreign rows look the same to the caller
    row = lookup(user_id, str(entity_id))
    if row is None:
        raise NotFound(f"{label} not found or access denied")
    return row


class OwnershipGuard:
    """Resolves referenced ids under the caller's ownership filter or raises NotFound."""

    def __init__(self, repos: Repos) -> None:
        self.repos = repos

    def contact(self, user_id: str, contact_id: object) -> Contact:
        return _require("Contact", self.repos.contacts.get, user_id, contact_id)

    def company(self, user_id: str, company_id: object) -> Company:
        return _require("Company", self.repos.companies.get, user_id, company_id)

    def conference(self, user_id: str, conference_id: object) -> Conference:
        return _require("Conference", self.repos.conferences.get, user_id, conference_id)

    def meeting(self, user_id: str, meeting_id: object) -> Meeting:
        return _require("Meeting", self.repos.meetings.get, user_id, meeting_id)

    def card(self, user_id: str, card_id: object) -> BusinessCard:
        return _require("Card", self.repos.cards.get, user_id, card_id)

    def note(self, user_id: str, note_id: object) -> Note:
        return _require("Note", self.repos.notes.get, user_id, note_id)
