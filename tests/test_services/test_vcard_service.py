"""Tests for vCard serialization and download headers."""

from __future__ import annotations

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from backend.models import Organization, User
from backend.services.vcard_service import (
    build_vcard,
    content_disposition,
    escape_value,
    fold_line,
    vcard_filename,
)


def _make_user(**overrides: Any) -> User:
    fields: dict[str, Any] = {
        "id": 5,
        "login_name": "jdoe",
        "password_hash": "x",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "",
        "phone": "",
        "mobile": "",
        "street": "",
        "postcode": "",
        "city": "",
        "country": "",
        "birthday": None,
        "website": "",
        "note": "",
        "is_admin": False,
        "created_at": "2026-01-01T00:00:00+00:00",
        "updated_at": "2026-01-01T00:00:00+00:00",
    }
    fields.update(overrides)
    return User(**fields)


class TestEscapeValue:
    def test_special_characters(self) -> None:
        assert escape_value("a,b;c\\d") == "a\\,b\\;c\\\\d"

    def test_newlines(self) -> None:
        assert escape_value("one\r\ntwo\nthree") == "one\\ntwo\\nthree"


class TestFoldLine:
    def test_short_line_unchanged(self) -> None:
        assert fold_line("FN:Jane Doe") == "FN:Jane Doe"

    def test_long_line_folded(self) -> None:
        folded = fold_line("NOTE:" + "x" * 200)
        parts = folded.split("\r\n")
        assert len(parts) > 1
        assert all(part.startswith(" ") for part in parts[1:])
        assert all(len(part.encode()) <= 75 for part in parts)
        assert "".join(part[1:] if i else part for i, part in enumerate(parts)) == (
            "NOTE:" + "x" * 200
        )


@given(st.text(min_size=0, max_size=300).filter(lambda s: "\r" not in s and "\n" not in s))
def test_folding_never_exceeds_line_limit(text: str) -> None:
    folded = fold_line("NOTE:" + text)
    for part in folded.split("\r\n"):
        assert len(part.encode("utf-8")) <= 75


class TestBuildVcard:
    def test_minimal_card(self) -> None:
        card = build_vcard(_make_user())
        assert card == (
            "BEGIN:VCARD\r\n"
            "VERSION:3.0\r\n"
            "N:Doe;Jane;;;\r\n"
            "FN:Jane Doe\r\n"
            "NICKNAME:jdoe\r\n"
            "END:VCARD\r\n"
        )

    def test_full_card(self) -> None:
        user = _make_user(
            email="jane@example.org",
            phone="+49 30 1234",
            mobile="+49 170 5678",
            street="Main St. 1",
            postcode="10115",
            city="Berlin",
            country="Germany",
            birthday="1990-04-02",
            website="https://jane.example.org",
            note="Treasurer; since 2020",
        )
        card = build_vcard(user, Organization(id=1, shortname="TC", longname="Test Club"))
        lines = card.split("\r\n")
        assert "EMAIL;TYPE=INTERNET:jane@example.org" in lines
        assert "TEL;TYPE=HOME,VOICE:+49 30 1234" in lines
        assert "TEL;TYPE=CELL,VOICE:+49 170 5678" in lines
        assert "ADR;TYPE=HOME:;;Main St. 1;Berlin;;10115;Germany" in lines
        assert "BDAY:1990-04-02" in lines
        assert "URL:https://jane.example.org" in lines
        assert "ORG:Test Club" in lines
        assert "NOTE:Treasurer\\; since 2020" in lines

    def test_invalid_birthday_skipped(self) -> None:
        card = build_vcard(_make_user(birthday="not a date"))
        assert "BDAY" not in card

    def test_names_escaped(self) -> None:
        card = build_vcard(_make_user(first_name="Ann, Jr.", last_name="O;Neil"))
        assert "N:O\\;Neil;Ann\\, Jr.;;;\r\n" in card


class TestDownloadHeaders:
    def test_filename_from_names(self) -> None:
        assert vcard_filename(_make_user()) == "Jane Doe.vcf"

    def test_filename_falls_back_to_login(self) -> None:
        assert vcard_filename(_make_user(first_name="", last_name="")) == "jdoe.vcf"

    def test_filename_strips_quotes_and_control_characters(self) -> None:
        user = _make_user(first_name='Ja"ne', last_name="Doe\r\nX-Evil: 1")
        assert vcard_filename(user) == "Jane DoeX-Evil: 1.vcf"

    def test_ascii_disposition(self) -> None:
        assert content_disposition("Jane Doe.vcf") == 'attachment; filename="Jane Doe.vcf"'

    def test_non_ascii_disposition(self) -> None:
        header = content_disposition("Jürgen Müller.vcf")
        assert header.startswith('attachment; filename="Jurgen Muller.vcf"')
        assert "filename*=UTF-8''J%C3%BCrgen%20M%C3%BCller.vcf" in header
        header.encode("latin-1")
