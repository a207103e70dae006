import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from api.handlers import build_app
from config.settings import get_settings
from db import schema
from db.connection import get_connection
from db.stores import build_sqlite_repos
from utils.logging_setup import init_logging


DEMO_USER_ID = "00000000-0000-4000-8000-000000000001"


def _settings_for(args):
    settings = get_settings()
    if args.db != settings.db_path:
        settings = replace(settings, db_path=args.db)
    return settings


def _load_payload(raw):
    if raw is None:
        return {}
    if raw.startswith("@"):
        raw = Path(raw[1:]).read_text(encoding="utf-8")
    return json.loads(raw)


def cmd_bootstrap(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    print("Schema ready")


def cmd_call(args):
    settings = _settings_for(args)
    app = build_app(settings)
    try:
        payload = _load_payload(args.payload)
    except (OSError, ValueError) as exc:
        print(json.dumps({"error": f"Invalid payload: {exc}"}))
        raise SystemExit(2)
    response = app.dispatch(args.operation, payload, f"Bearer {args.token}" if args.token else None)
    print(json.dumps({"status": response.status, **response.body}, indent=2, ensure_ascii=False))
    if not response.ok:
        raise SystemExit(1)


def cmd_seed_demo(args):
    settings = _settings_for(args)
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    app = build_app(settings, repos=build_sqlite_repos(conn))
    user_id = args.user

    company = app.companies.upsert(user_id, {
        "name": "Stellar Inc",
        "domain": "https://www.stellar.example/",
        "industry": "Software",
        "city": "Austin",
        "country": "USA",
    })
    jennifer = app.contacts.upsert(user_id, {
        "full_name": "Jennifer Lee",
        "company": "Stellar Inc",
        "email": "jennifer.lee@stellar.example",
        "title": "VP Partnerships",
    })
    marcus = app.contacts.upsert(user_id, {
        "full_name": "Marcus Johnson",
        "company": "CloudNext",
        "email": "marcus.johnson@cloudnext.example",
        "phone": "+1-555-0142",
    })
    app.contacts.upsert(user_id, {"full_name": "Priya Patel", "email": "priya.patel@gmail.com"})

    conference = app.conferences.create(user_id, {
        "name": "SaaS Summit",
        "start_date": "2024-03-12",
        "end_date": "2024-03-14",
        "location": "Austin, TX",
    })
    meeting = app.meetings.create(user_id, {
        "event": "SaaS Summit",
        "location": "Booth 12",
        "summary": "Walked through the integration roadmap",
        "contacts": [{"contact_id": jennifer.id, "role": "decision maker"}],
    })["meeting"]
    app.conferences.add_session(user_id, {
        "conference_id": conference.id,
        "contact_id": jennifer.id,
        "meeting_id": meeting.id,
        "title": "Partnership intro",
    })

    note = app.notes.create(user_id, {
        "audio_url": "/mock-audio-1700000000000.mp3",
        "contact_id": marcus.id,
        "conference_id": conference.id,
    })
    app.notes.update(user_id, {
        "note_id": note.id,
        "transcript": "Coffee meeting went well. Want to see a demo next week.",
        "summary": ["Interested in workflow automation", "Demo requested for next week"],
        "next_step": "Schedule demo call",
        "tags": note.tags + ["follow-up"],
        "status": "ready",
        "conference_id": conference.id,
    })
    print(f"Seeded demo data for user {user_id} (company {company.id}, conference {conference.id})")


def main(argv=None):
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Capture CRM CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_call = sub.add_parser("call", help="Run one operation and print the JSON response")
    p_call.add_argument("operation", help="Operation name, e.g. create_note")
    p_call.add_argument("--token", help="Bearer token (resolved by the configured auth backend)")
    p_call.add_argument("--payload", help="JSON object, or @path to a JSON file")
    p_call.set_defaults(func=cmd_call)

    p_seed = sub.add_parser("seed-demo", help="Insert demo contacts, a company, a conference and a note")
    p_seed.add_argument("--user", default=DEMO_USER_ID, help="Owner user id for the demo rows")
    p_seed.set_defaults(func=cmd_seed_demo)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main(sys.argv[1:])
