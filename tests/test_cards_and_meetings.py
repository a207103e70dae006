from __future__ import annotations

import pytest

from conftest import ALICE, BOB
from pipelines.extract_card import extract_card
from services.errors import NotFound, UpstreamFailure, ValidationFailed


CARD_URL = "/mock-card-1700000000000.jpg"


def test_create_card_accepts_upload_path_or_web_url(app):
    assert app.cards.create(ALICE, {"image_url": CARD_URL}).image_url == CARD_URL
    assert app.cards.create(ALICE, {"image_url": "https://cdn.example.com/card.png"}).processed_at is None
    with pytest.raises(ValidationFailed):
        app.cards.create(ALICE, {"image_url": "card.png"})


def test_process_card_stores_extraction(app, repos):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    processed = app.cards.process(ALICE, {
        "card_id": card.id,
        "ocr_text": "Jane Doe\nAcme",
        "extracted": {"name": "Jane Doe", "company": "Acme", "email": "jane@acme.io", "phone": "+1 555 0100"},
        "linkedin_guess": "https://linkedin.com/in/janedoe",
    })
    assert processed.processed_at is not None
    assert processed.extracted.email == "jane@acme.io"
    stored = repos.cards.get(ALICE, card.id)
    assert stored.extracted.name == "Jane Doe"
    assert stored.ocr_text == "Jane Doe\nAcme"


def test_process_card_rejects_unknown_extracted_keys(app, repos):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    with pytest.raises(ValidationFailed) as exc:
        app.cards.process(ALICE, {"card_id": card.id, "extracted": {"name": "Jane", "title": "CEO"}})
    assert exc.value.details == [{"field": "extracted.title", "message": "Extra inputs are not permitted"}]
    assert repos.cards.get(ALICE, card.id).processed_at is None


def test_process_card_confirms_contact_and_keeps_extraction(app):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    app.cards.process(ALICE, {"card_id": card.id, "extracted": {"name": "Jane"}})
    contact = app.contacts.upsert(ALICE, {"full_name": "Jane"})
    confirmed = app.cards.process(ALICE, {"card_id": card.id, "contact_id": contact.id})
    assert confirmed.contact_id == contact.id
    assert confirmed.extracted.name == "Jane"


def test_process_card_ownership(app):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    with pytest.raises(NotFound) as exc:
        app.cards.process(BOB, {"card_id": card.id, "ocr_text": "x"})
    assert str(exc.value) == "Card not found or access denied"

    bobs_contact = app.contacts.upsert(BOB, {"full_name": "Jim"})
    with pytest.raises(NotFound):
        app.cards.process(ALICE, {"card_id": card.id, "contact_id": bobs_contact.id})


def test_extract_card_runs_engine_and_applies_result(app):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    processed = extract_card(app.cards, app.card_engine, ALICE, {"card_id": card.id})
    assert processed.processed_at is not None
    assert processed.extracted.name in {"Jennifer Lee", "Marcus Johnson", "Priya Patel", "Tom Anderson"}
    assert processed.linkedin_guess.startswith("https://linkedin.com/in/")
    assert processed.ocr_text.splitlines()[0] == processed.extracted.name


class _FailingCardEngine:
    def extract_card(self, image_url):
        raise TimeoutError("ocr provider timed out")


class _NoisyCardEngine:
    def extract_card(self, image_url):
        return {"ocr_text": "Jane", "extracted": {"name": "Jane", "confidence": 0.4}, "linkedin_guess": None}


def test_extract_card_failure_is_upstream(app, repos):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    with pytest.raises(UpstreamFailure) as exc:
        extract_card(app.cards, _FailingCardEngine(), ALICE, {"card_id": card.id})
    assert "timed out" not in str(exc.value)
    assert repos.cards.get(ALICE, card.id).processed_at is None


def test_extract_card_drops_unknown_engine_fields(app):
    card = app.cards.create(ALICE, {"image_url": CARD_URL})
    processed = extract_card(app.cards, _NoisyCardEngine(), ALICE, {"card_id": card.id})
    assert processed.extracted.name == "Jane"


def test_create_meeting_links_contacts(app, repos):
    jane = app.contacts.upsert(ALICE, {"full_name": "Jane"})
    john = app.contacts.upsert(ALICE, {"full_name": "John"})
    result = app.meetings.create(ALICE, {
        "happened_at": "2024-03-12T10:00:00Z",
        "event": "SaaS Summit",
        "contacts": [{"contact_id": jane.id, "role": "champion"}, {"contact_id": john.id}],
    })
    meeting = result["meeting"]
    assert meeting.happened_at == "2024-03-12T10:00:00.000+00:00"
    assert {(l.contact_id, l.role) for l in result["contacts"]} == {(jane.id, "champion"), (john.id, None)}
    detail = app.contacts.get(ALICE, {"contact_id": jane.id})
    assert [m.id for m in detail["meetings"]] == [meeting.id]


def test_create_meeting_with_foreign_contact_writes_nothing(app, repos):
    jane = app.contacts.upsert(ALICE, {"full_name": "Jane"})
    jim = app.contacts.upsert(BOB, {"full_name": "Jim"})
    with pytest.raises(NotFound):
        app.meetings.create(ALICE, {"contacts": [{"contact_id": jane.id}, {"contact_id": jim.id}]})
    assert repos.meetings.list_for_contact(ALICE, jane.id) == []
