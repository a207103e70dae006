from __future__ import annotations

import logging
from typing import Any

from models import BusinessCard
from models.payloads import CardRef
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import ApplyCardResult, ExtractCardFields
from ports import CardEnginePort
from services.cards import CardsService
from services.errors import UpstreamFailure
from services.validation import require_valid


logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Card processing failed - please try again"


def extract_card(cards: CardsService, engine: CardEnginePort, user_id: str, payload: Any) -> BusinessCard:
    data = require_valid(CardRef, payload)
    card = cards.guard.card(user_id, data.card_id)
    ctx = RunContext(user_id=user_id, record_id=card.id, record=card)

    try:
        ctx = Pipeline([ExtractCardFields(engine), ApplyCardResult(cards)]).run(ctx)
    except Exception as exc:
        logger.error(
            "Card extraction failed",
            exc_info=True,
            extra={"user_id": user_id, "op": "extract_card", "error": str(exc)},
        )
        raise UpstreamFailure(FAILURE_MESSAGE) from exc
    return ctx.record
