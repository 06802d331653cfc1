"""Tests for datetime helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from backend.services.datetime_service import format_iso, now_utc, parse_date


class TestParseDate:
    def test_iso_date(self) -> None:
        assert parse_date("1990-04-02") == date(1990, 4, 2)

    def test_datetime_string(self) -> None:
        assert parse_date("1990-04-02 13:45") == date(1990, 4, 2)

    def test_t_separator(self) -> None:
        assert parse_date("1990-04-02T13:45:00+02:00") == date(1990, 4, 2)

    def test_date_object_passthrough(self) -> None:
        assert parse_date(date(2000, 1, 1)) == date(2000, 1, 1)

    def test_datetime_object(self) -> None:
        assert parse_date(datetime(2000, 1, 1, 12, 0)) == date(2000, 1, 1)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value: str | None) -> None:
        assert parse_date(value) is None

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_date("not a date")


class TestFormatting:
    def test_now_is_utc(self) -> None:
        assert now_utc().tzinfo == timezone.utc

    def test_naive_datetime_assumed_utc(self) -> None:
        assert format_iso(datetime(2026, 2, 2, 22, 21)) == "2026-02-02T22:21:00+00:00"
