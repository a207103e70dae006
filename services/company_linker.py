"""Maps contacts and companies onto per-owner company domains.

Domain uniqueness lives in the store (UNIQUE(owner_user_id, domain) on
company_domains). The linker always inserts optimistically and, when another
request won the race, deletes the company it just created and adopts the
winner's id, so an owner never ends up with two companies for one domain.
"""
from __future__ import annotations

import logging
from typing import Optional

from db.errors import UniqueViolation
from models import Company, CompanyDomain
from ports import Repos
from services.domain_utils import company_name_from_domain, email_domain, is_free_email_domain
from services.errors import Conflict


logger = logging.getLogger(__name__)

DUPLICATE_DOMAIN_MESSAGE = "A company with this domain already exists"


class CompanyLinker:
    def __init__(self, repos: Repos) -> None:
        self.repos = repos

    def company_for_email(self, user_id: str, email: Optional[str], company_name: Optional[str] = None) -> Optional[str]:
        """Company id to attach to a contact with ``email``; None for free providers.

        Creates the company (named after ``company_name`` or the domain's first
        label) when the owner has no company for the domain yet.
        """
        domain = email_domain(email)
        if not domain or is_free_email_domain(domain):
            return None

        existing = self.repos.company_domains.find(user_id, domain)
        if existing:
            return existing.company_id

        name = (company_name or company_name_from_domain(domain))[:100]
        company = self.repos.companies.save(Company(owner_user_id=user_id, name=name, domain=domain))
        try:
            self.repos.company_domains.add(
                CompanyDomain(company_id=company.id, domain=domain, owner_user_id=user_id)
            )
        except UniqueViolation:
            winner = self._adopt_winner(user_id, company.id, domain)
            return winner
        logger.info("Created company from email domain", extra={"user_id": user_id, "op": "link_company"})
        return company.id

    def register_new(self, company: Company) -> Company:
        """Persist a new company and claim its domain, or raise Conflict."""
        domain = company.domain
        if domain:
            existing = self.repos.company_domains.find(company.owner_user_id, domain)
            if existing:
                raise Conflict(DUPLICATE_DOMAIN_MESSAGE, existing_company_id=existing.company_id)

        self.repos.companies.save(company)
        if domain:
            try:
                self.repos.company_domains.add(
                    CompanyDomain(company_id=company.id, domain=domain, owner_user_id=company.owner_user_id)
                )
            except UniqueViolation:
                winner = self._adopt_winner(company.owner_user_id, company.id, domain)
                raise Conflict(DUPLICATE_DOMAIN_MESSAGE, existing_company_id=winner)
        return company

    def check_domain_free(self, company: Company, domain: Optional[str]) -> bool:
        """For an update: raise Conflict if another of the owner's companies holds
        ``domain``. Returns True when the domain still needs to be claimed."""
        if not domain:
            return False
        existing = self.repos.company_domains.find(company.owner_user_id, domain)
        if existing is None:
            return True
        if existing.company_id != company.id:
            raise Conflict(DUPLICATE_DOMAIN_MESSAGE, existing_company_id=existing.company_id)
        return False

    def claim_domain(self, company: Company, domain: str) -> None:
        try:
            self.repos.company_domains.add(
                CompanyDomain(company_id=company.id, domain=domain, owner_user_id=company.owner_user_id)
            )
        except UniqueViolation:
            winner = self.repos.company_domains.find(company.owner_user_id, domain)
            if winner and winner.company_id != company.id:
                raise Conflict(DUPLICATE_DOMAIN_MESSAGE, existing_company_id=winner.company_id)

    def _adopt_winner(self, user_id: str, loser_id: str, domain: str) -> Optional[str]:
        self.repos.companies.delete(user_id, loser_id)
        winner = self.repos.company_domains.find(user_id, domain)
        logger.info(
            "Lost company domain race; using existing company",
            extra={"user_id": user_id, "op": "link_company"},
        )
        return winner.company_id if winner else None
