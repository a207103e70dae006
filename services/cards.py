from __future__ import annotations

import logging
from typing import Any, Optional

from models import BusinessCard, CardFields, utc_now
from models.payloads import CreateCardPayload, ProcessCardPayload
from ports import Repos
from services.ownership import OwnershipGuard
from services.validation import require_valid


logger = logging.getLogger(__name__)


class CardsService:
    def __init__(self, repos: Repos, guard: OwnershipGuard, *, upload_url_pattern: Optional[str] = None) -> None:
        self.repos = repos
        self.guard = guard
        self.upload_url_pattern = upload_url_pattern

    def create(self, user_id: str, payload: Any) -> BusinessCard:
        context = {"upload_url_pattern": self.upload_url_pattern} if self.upload_url_pattern else {}
        data = require_valid(CreateCardPayload, payload, context=context)
        card = BusinessCard(user_id=user_id, image_url=data.image_url)
        self.repos.cards.save(card)
        logger.info("Card created", extra={"user_id": user_id, "op": "create_card"})
        return card

    def process(self, user_id: str, payload: Any) -> BusinessCard:
        """Store OCR output for a card and stamp ``processed_at``.

        Only the keys present in the payload are written, so a confirmation
        that just sets ``contact_id`` keeps the earlier extraction.
        """
        data = require_valid(ProcessCardPayload, payload)
        card = self.guard.card(user_id, data.card_id)
        contact = self.guard.contact(user_id, data.contact_id) if data.contact_id else None

        changes = data.model_dump(exclude_unset=True, exclude={"card_id", "extracted", "contact_id"})
        if "extracted" in data.model_fields_set:
            changes["extracted"] = CardFields(**data.extracted.model_dump()) if data.extracted else None
        if contact is not None:
            changes["contact_id"] = contact.id

        updated = card.touched(processed_at=utc_now(), **changes)
        self.repos.cards.save(updated)
        logger.info("Card processed", extra={"user_id": user_id, "op": "process_card"})
        return updated
