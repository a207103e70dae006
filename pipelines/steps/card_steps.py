from __future__ import annotations

import time

from models.payloads import CardFieldsPayload
from pipelines.runner import RunContext
from ports import CardEnginePort
from services.cards import CardsService


CARD_FIELD_KEYS = tuple(CardFieldsPayload.model_fields)


class ExtractCardFields:
    def __init__(self, engine: CardEnginePort) -> None:
        self.engine = engine

    def run(self, ctx: RunContext) -> RunContext:
        t0 = time.time()
        result = self.engine.extract_card(ctx.record.image_url)
        if not isinstance(result, dict):
            raise ValueError("card engine returned a non-object result")
        ctx.result = result
        ctx.meta["engine_ms"] = int((time.time() - t0) * 1000)
        return ctx


class ApplyCardResult:
    def __init__(self, cards: CardsService) -> None:
        self.cards = cards

    def run(self, ctx: RunContext) -> RunContext:
        result = ctx.result
        extracted = result.get("extracted") or {}
        payload = {
            "card_id": ctx.record.id,
            "ocr_text": result.get("ocr_text"),
            # Engines may add keys of their own; the stored object keeps the four known ones
            "extracted": {k: extracted.get(k) for k in CARD_FIELD_KEYS} if isinstance(extracted, dict) else extracted,
            "linkedin_guess": result.get("linkedin_guess"),
        }
        ctx.record = self.cards.process(ctx.user_id, payload)
        return ctx
