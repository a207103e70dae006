from __future__ import annotations

import logging
from typing import Any, Dict, List

from models import Contact
from models.payloads import ContactPayload, ContactRef
from ports import Repos
from services.company_linker import CompanyLinker
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)


class ContactsService:
    def __init__(self, repos: Repos, guard: OwnershipGuard, linker: CompanyLinker) -> None:
        self.repos = repos
        self.guard = guard
        self.linker = linker

    def upsert(self, user_id: str, payload: Any) -> Contact:
        """Create or update a contact and attach it to a company.

        An explicit ``company_id`` wins; otherwise a work email links (or
        creates) the company for its domain. Free-provider or missing addresses
        leave the contact without a company, on updates too.
        """
        data = require_valid(ContactPayload, payload)
        # Resolve every reference before writing anything
        current = self.guard.contact(user_id, data.id) if data.id is not None else None
        explicit_company = self.guard.company(user_id, data.company_id) if data.company_id is not None else None

        # Every column is written; fields missing from an update become null
        fields = data.model_dump(exclude={"id", "company_id"})

        if explicit_company is not None:
            company_id = explicit_company.id
        else:
            company_id = self.linker.company_for_email(user_id, data.email, data.company)

        if current is None:
            contact = Contact(user_id=user_id, company_id=company_id, **fields)
        else:
            contact = current.touched(company_id=company_id, **fields)
        self.repos.contacts.save(contact)
        logger.info("Contact saved", extra={"user_id": user_id, "op": "upsert_contact"})
        return contact

    def list(self, user_id: str) -> List[Contact]:
        return self.repos.contacts.list_for_user(user_id)

    def get(self, user_id: str, payload: Any) -> Dict[str, Any]:
        contact_id = require_valid(ContactRef, payload).contact_id
        contact = self.guard.contact(user_id, contact_id)
        return {
            "contact": contact,
            "meetings": self.repos.meetings.list_for_contact(user_id, contact.id),
        }
