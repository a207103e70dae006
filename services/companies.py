from __future__ import annotations

import logging
from typing import Any, Dict, List

from models import Company
from models.payloads import CompanyPayload, CompanyRef
from ports import Repos
from services.company_linker import CompanyLinker
from services.domain_utils import normalize_domain
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)


class CompaniesService:
    def __init__(self, repos: Repos, guard: OwnershipGuard, linker: CompanyLinker) -> None:
        self.repos = repos
        self.guard = guard
        self.linker = linker

    def upsert(self, user_id: str, payload: Any) -> Company:
        """Create a company, or update one the caller owns when ``id`` is given.

        The display domain is stored normalized; a domain already held by
        another of the caller's companies is a Conflict carrying that id.
        """
        data = require_valid(CompanyPayload, payload)
        fields = data.model_dump(exclude={"id"}, exclude_unset=data.id is not None)
        if "domain" in fields:
            fields["domain"] = normalize_domain(fields["domain"])

        if data.id is None:
            company = Company(owner_user_id=user_id, **fields)
            company = self.linker.register_new(company)
            logger.info("Company created", extra={"user_id": user_id, "op": "upsert_company"})
            return company

        current = self.guard.company(user_id, data.id)
        domain = fields.get("domain")
        needs_claim = self.linker.check_domain_free(current, domain)
        updated = current.touched(**fields)
        self.repos.companies.save(updated)
        if needs_claim:
            self.linker.claim_domain(updated, domain)
        logger.info("Company updated", extra={"user_id": user_id, "op": "upsert_company"})
        return updated

    def list(self, user_id: str) -> List[Company]:
        return self.repos.companies.list_for_owner(user_id)

    def get(self, user_id: str, payload: Any) -> Dict[str, Any]:
        company_id = require_valid(CompanyRef, payload).company_id
        company = self.guard.company(user_id, company_id)
        return {
            "company": company,
            "contacts": self.repos.contacts.list_for_company(user_id, company.id),
            "domains": [d.domain for d in self.repos.company_domains.list_for_company(user_id, company.id)],
        }
