from __future__ import annotations

import pytest

from conftest import ALICE, BOB
from models import Conference, ConferenceSession, Contact, Meeting
from services.conferences import render_recap
from services.errors import NotFound, UpstreamFailure


def test_add_session_with_foreign_contact_is_404_and_writes_nothing(app, repos):
    conf = app.conferences.create(ALICE, {"name": "SaaS Summit"})
    bobs_contact = app.contacts.upsert(BOB, {"full_name": "Jim"})
    with pytest.raises(NotFound) as exc:
        app.conferences.add_session(ALICE, {"conference_id": conf.id, "contact_id": bobs_contact.id})
    assert str(exc.value) == "Contact not found or access denied"
    assert repos.sessions.list_for_conference(ALICE, conf.id) == []


def test_add_session_checks_conference_and_meeting(app, repos):
    bobs_conf = app.conferences.create(BOB, {"name": "BobCon"})
    with pytest.raises(NotFound):
        app.conferences.add_session(ALICE, {"conference_id": bobs_conf.id})

    conf = app.conferences.create(ALICE, {"name": "SaaS Summit"})
    bobs_meeting = app.meetings.create(BOB, {"event": "Lunch"})["meeting"]
    with pytest.raises(NotFound) as exc:
        app.conferences.add_session(ALICE, {"conference_id": conf.id, "meeting_id": bobs_meeting.id})
    assert str(exc.value) == "Meeting not found or access denied"
    assert repos.sessions.list_for_conference(ALICE, conf.id) == []


def test_add_session_defaults_and_explicit_start(app):
    conf = app.conferences.create(ALICE, {"name": "SaaS Summit"})
    contact = app.contacts.upsert(ALICE, {"full_name": "Jane"})
    session = app.conferences.add_session(ALICE, {
        "conference_id": conf.id,
        "contact_id": contact.id,
        "title": "Booth chat",
        "started_at": "2024-03-12T10:00:00Z",
    })
    assert session.contact_id == contact.id
    assert session.started_at == "2024-03-12T10:00:00.000+00:00"
    untimed = app.conferences.add_session(ALICE, {"conference_id": conf.id})
    assert untimed.title is None
    assert untimed.started_at


def test_get_conference_orders_sessions_by_start(app):
    conf = app.conferences.create(ALICE, {"name": "SaaS Summit", "start_date": "2024-03-12"})
    app.conferences.add_session(ALICE, {"conference_id": conf.id, "title": "late", "started_at": "2024-03-12T15:00:00Z"})
    app.conferences.add_session(ALICE, {"conference_id": conf.id, "title": "early", "started_at": "2024-03-12T09:00:00Z"})
    detail = app.conferences.get(ALICE, {"conference_id": conf.id})
    assert detail["conference"].start_date == "2024-03-12"
    assert [s.title for s in detail["sessions"]] == ["early", "late"]
    with pytest.raises(NotFound):
        app.conferences.get(BOB, {"conference_id": conf.id})


def test_render_recap_format():
    conf = Conference(
        owner_user_id=ALICE,
        name="SaaS Summit",
        location="Austin",
        start_date="2024-03-12",
        end_date="2024-03-14",
        notes="Great show.",
    )
    contact = Contact(user_id=ALICE, full_name="Jane Doe", company="Acme")
    meeting = Meeting(owner_user_id=ALICE, summary="Discussed pricing")
    first = ConferenceSession(conference_id=conf.id, owner_user_id=ALICE, title="Booth chat", started_at="2024-03-12T10:00:00.000+00:00")
    second = ConferenceSession(conference_id=conf.id, owner_user_id=ALICE, started_at="2024-03-13T11:00:00.000+00:00")

    text = render_recap(conf, [
        {"session": first, "contact": contact, "meeting": meeting},
        {"session": second, "contact": None, "meeting": None},
    ])
    assert text == (
        "CONFERENCE RECAP: SaaS Summit\n"
        "Location: Austin\n"
        "Dates: 2024-03-12 - 2024-03-14\n"
        "\n"
        "Total Sessions: 2\n"
        "\n"
        "SESSIONS:\n"
        "\n"
        "1. Booth chat\n"
        "   Date: 2024-03-12T10:00:00.000+00:00\n"
        "   Contact: Jane Doe (Acme)\n"
        "   Summary: Discussed pricing\n"
        "\n"
        "2. Untitled Session\n"
        "   Date: 2024-03-13T11:00:00.000+00:00\n"
        "\n"
        "\n"
        "NOTES:\n"
        "Great show.\n"
    )


def test_render_recap_without_sessions():
    conf = Conference(owner_user_id=ALICE, name="Empty Con")
    text = render_recap(conf, [])
    assert "Location: N/A\n" in text
    assert "Dates: N/A - N/A\n" in text
    assert "Total Sessions: 0\n" in text
    assert text.endswith("SESSIONS:\n\nNo sessions recorded.\n")
    assert "NOTES:" not in text


def test_generate_recap_stores_blob_and_returns_signed_link(app, repos, blobs):
    conf = app.conferences.create(ALICE, {"name": "SaaS Summit", "notes": "Bring more flyers"})
    contact = app.contacts.upsert(ALICE, {"full_name": "Jane Doe", "company": "Acme"})
    meeting = app.meetings.create(ALICE, {"summary": "Discussed pricing", "contacts": [{"contact_id": contact.id}]})["meeting"]
    app.conferences.add_session(ALICE, {
        "conference_id": conf.id,
        "contact_id": contact.id,
        "meeting_id": meeting.id,
        "title": "Booth chat",
        "started_at": "2024-03-12T10:00:00Z",
    })

    result = app.conferences.generate_recap(ALICE, {"conference_id": conf.id})
    assert result["expires_in"] == 3600
    recap = result["recap"]
    assert recap.storage_path.startswith(f"{ALICE}/conference-recap-{conf.id}-")
    assert recap.storage_path.endswith(".txt")

    data, content_type = blobs.objects[f"conference_recaps/{recap.storage_path}"]
    assert content_type == "text/plain"
    text = data.decode("utf-8")
    assert "1. Booth chat" in text
    assert "   Contact: Jane Doe (Acme)" in text
    assert "   Summary: Discussed pricing" in text
    assert text.endswith("NOTES:\nBring more flyers\n")

    assert blobs.verify_signed_url(result["download_url"])
    assert [r.id for r in repos.recaps.list_for_conference(ALICE, conf.id)] == [recap.id]


def test_generate_recap_for_foreign_conference_is_404(app, repos):
    conf = app.conferences.create(BOB, {"name": "BobCon"})
    with pytest.raises(NotFound):
        app.conferences.generate_recap(ALICE, {"conference_id": conf.id})
    assert repos.recaps.list_for_conference(BOB, conf.id) == []


def test_generate_recap_upload_failure_is_upstream(app, repos, blobs, monkeypatch):
    conf = app.conferences.create(ALICE, {"name": "SaaS Summit"})

    def broken_put(path, data, content_type):
        raise OSError("disk full")

    monkeypatch.setattr(blobs, "put", broken_put)
    with pytest.raises(UpstreamFailure) as exc:
        app.conferences.generate_recap(ALICE, {"conference_id": conf.id})
    assert "disk full" not in str(exc.value)
    assert repos.recaps.list_for_conference(ALICE, conf.id) == []
