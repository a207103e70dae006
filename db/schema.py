from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create the capture schema and its indexes (idempotent)."""
    cur = conn.cursor()

    # Companies and the domains that identify them
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  name TEXT NOT NULL,\n"
            "  domain TEXT,\n"
            "  website_url TEXT,\n"
            "  phone TEXT,\n"
            "  city TEXT,\n"
            "  state TEXT,\n"
            "  country TEXT,\n"
            "  industry TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  notes TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_companies_owner_name ON companies(owner_user_id, name);")

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS company_domains (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  company_id TEXT NOT NULL,\n"
            "  domain TEXT NOT NULL,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  created_at TEXT NOT NULL,\n"
            "  UNIQUE(owner_user_id, domain),\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE CASCADE\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_company_domains_company ON company_domains(company_id);")

    # Contacts
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS contacts (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  user_id TEXT NOT NULL,\n"
            "  full_name TEXT NOT NULL,\n"
            "  company TEXT,\n"
            "  email TEXT,\n"
            "  phone TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  avatar_url TEXT,\n"
            "  title TEXT,\n"
            "  company_id TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_contacts_user_name ON contacts(user_id, full_name);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_contacts_company_id ON contacts(company_id);")

    # Notes
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS notes (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  user_id TEXT NOT NULL,\n"
            "  contact_id TEXT,\n"
            "  audio_url TEXT,\n"
            "  photo_urls_json TEXT NOT NULL DEFAULT '[]',\n"
            "  transcript TEXT,\n"
            "  summary_json TEXT NOT NULL DEFAULT '[]',\n"
            "  next_step TEXT,\n"
            "  tags_json TEXT NOT NULL DEFAULT '[]',\n"
            "  due_date TEXT,\n"
            "  status TEXT NOT NULL DEFAULT 'draft' CHECK (status IN ('draft', 'processing', 'ready', 'error')),\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(contact_id) REFERENCES contacts(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_notes_user_created ON notes(user_id, created_at);")

    # Business cards
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS business_cards (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  user_id TEXT NOT NULL,\n"
            "  image_url TEXT NOT NULL,\n"
            "  contact_id TEXT,\n"
            "  ocr_text TEXT,\n"
            "  extracted_json TEXT,\n"
            "  linkedin_guess TEXT,\n"
            "  processed_at TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(contact_id) REFERENCES contacts(id) ON DELETE SET NULL\n"
            ")"
        )
    )

    # Meetings and who attended them
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS meetings (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  happened_at TEXT NOT NULL,\n"
            "  location TEXT,\n"
            "  event TEXT,\n"
            "  notes_raw TEXT,\n"
            "  summary TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL\n"
            ")"
        )
    )
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS contact_meetings (\n"
            "  contact_id TEXT NOT NULL,\n"
            "  meeting_id TEXT NOT NULL,\n"
            "  role TEXT,\n"
            "  PRIMARY KEY(contact_id, meeting_id),\n"
            "  FOREIGN KEY(contact_id) REFERENCES contacts(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(meeting_id) REFERENCES meetings(id) ON DELETE CASCADE\n"
            ")"
        )
    )

    # Conferences, their sessions and generated recaps
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS conferences (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  name TEXT NOT NULL,\n"
            "  start_date TEXT,\n"
            "  end_date TEXT,\n"
            "  location TEXT,\n"
            "  notes TEXT,\n"
            "  created_at TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL\n"
            ")"
        )
    )
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS conference_sessions (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  conference_id TEXT NOT NULL,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  contact_id TEXT,\n"
            "  meeting_id TEXT,\n"
            "  note_id TEXT,\n"
            "  title TEXT,\n"
            "  started_at TEXT NOT NULL,\n"
            "  created_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(conference_id) REFERENCES conferences(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(contact_id) REFERENCES contacts(id) ON DELETE SET NULL,\n"
            "  FOREIGN KEY(meeting_id) REFERENCES meetings(id) ON DELETE SET NULL,\n"
            "  FOREIGN KEY(note_id) REFERENCES notes(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_sessions_conference ON conference_sessions(conference_id, started_at);")
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS conference_recaps (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  conference_id TEXT NOT NULL,\n"
            "  owner_user_id TEXT NOT NULL,\n"
            "  storage_path TEXT NOT NULL,\n"
            "  generated_at TEXT NOT NULL,\n"
            "  FOREIGN KEY(conference_id) REFERENCES conferences(id) ON DELETE CASCADE\n"
            ")"
        )
    )

    conn.commit()
