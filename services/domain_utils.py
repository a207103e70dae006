from __future__ import annotations

import re
from typing import Optional


# Consumer mailbox providers: an address here says nothing about the employer
FREE_EMAIL_DOMAINS = frozenset({
    "gmail.com",
    "yahoo.com",
    "outlook.com",
    "hotmail.com",
    "icloud.com",
    "aol.com",
    "protonmail.com",
    "mail.com",
    "zoho.com",
    "yandex.com",
    "gmx.com",
    "inbox.com",
    "live.com",
    "msn.com",
    "me.com",
})


def normalize_domain(domain: Optional[str]) -> Optional[str]:
    """Reduce a free-text domain or URL to its lowercase host.

    "https://www.Example.com/path" and "EXAMPLE.com" both become "example.com".
    Returns None for empty input.
    """
    if not domain:
        return None
    text = str(domain).strip().lower()
    text = re.sub(r"^https?://", "", text)
    text = re.sub(r"^www\.", "", text)
    if text.endswith("/"):
        text = text[:-1]
    text = text.split("/", 1)[0]
    return text or None


def email_domain(email: Optional[str]) -> Optional[str]:
    """Normalized domain part of an email address, or None if there is none."""
    if not email or "@" not in email:
        return None
    return normalize_domain(email.split("@", 1)[1])


def is_free_email_domain(domain: Optional[str]) -> bool:
    return bool(domain) and domain in FREE_EMAIL_DOMAINS


def company_name_from_domain(domain: str) -> str:
    """Fallback display name for an auto-created company: the first label."""
    return domain.split(".", 1)[0]
