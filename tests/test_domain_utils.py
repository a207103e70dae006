from __future__ import annotations

import pytest

from services.domain_utils import (
    FREE_EMAIL_DOMAINS,
    company_name_from_domain,
    email_domain,
    is_free_email_domain,
    normalize_domain,
)


def test_normalize_strips_scheme_www_and_path():
    assert normalize_domain("https://www.Example.com/path") == "example.com"
    assert normalize_domain("EXAMPLE.com") == "example.com"
    assert normalize_domain("https://www.Example.com/path") == normalize_domain("EXAMPLE.com")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  http://acme.io/  ", "acme.io"),
        ("www.acme.io", "acme.io"),
        ("acme.io/", "acme.io"),
        ("https://sub.acme.io/a/b/c", "sub.acme.io"),
        ("", None),
        (None, None),
        ("   ", None),
    ],
)
def test_normalize_variants(raw, expected):
    assert normalize_domain(raw) == expected


def test_email_domain_lowercases_host():
    assert email_domain("Jane.Doe@Acme.IO") == "acme.io"
    assert email_domain("no-at-sign") is None
    assert email_domain(None) is None


def test_free_provider_denylist():
    assert len(FREE_EMAIL_DOMAINS) == 15
    assert is_free_email_domain("gmail.com")
    assert is_free_email_domain("me.com")
    assert not is_free_email_domain("acme.io")
    assert not is_free_email_domain(None)


def test_company_name_from_domain_uses_first_label():
    assert company_name_from_domain("acme.co.uk") == "acme"
