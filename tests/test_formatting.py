"""Tests for journal display helpers."""

from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.ledger.formatting import (
    WEEKDAY_NAMES,
    format_currency,
    format_entry_date,
    format_number,
    format_percentage,
    outcome_display,
    value_style,
    weekday_label,
)


class TestWeekdayLabel:
    def test_english(self):
        assert weekday_label(datetime(2024, 3, 4), "en") == "Monday"
        assert weekday_label(datetime(2024, 3, 10), "en") == "Sunday"

    def test_persian_is_default(self):
        assert weekday_label(datetime(2024, 3, 4)) == "دوشنبه"
        assert weekday_label(datetime(2024, 3, 9)) == "شنبه"

    def test_unsupported_locale(self):
        with pytest.raises(ValueError):
            weekday_label(datetime(2024, 3, 4), "de")

    @given(st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1)))
    @settings(max_examples=50)
    def test_every_day_has_a_label(self, moment: datetime):
        assert weekday_label(moment, "en") in WEEKDAY_NAMES["en"]
        assert weekday_label(moment, "fa") in WEEKDAY_NAMES["fa"]


class TestFormatNumber:
    @pytest.mark.parametrize(
        "num,expected",
        [
            (1500.0, "1,500"),
            (-1234.5, "-1,234.5"),
            (0.0, "0"),
            (-0.0001, "0"),
            (10600.125, "10,600.125"),
            (1234567.891, "1,234,567.891"),
        ],
    )
    def test_english(self, num, expected):
        assert format_number(num, "en") == expected

    def test_persian_digits_and_separators(self):
        assert format_number(1500.0) == "۱٬۵۰۰"
        assert format_number(-1234.5, "fa") == "−۱٬۲۳۴٫۵"

    def test_currency_and_percentage(self):
        assert format_currency(10600.0, "USD", "en") == "10,600 USD"
        assert format_percentage(66.666666, locale="en") == "66.67%"
        assert format_percentage(6.0, locale="en") == "6%"

    @given(st.floats(min_value=-1e9, max_value=1e9, allow_nan=False, allow_infinity=False))
    @settings(max_examples=100)
    def test_persian_has_no_ascii_digits(self, num: float):
        text = format_number(num, "fa")
        assert not any(ch.isascii() and ch.isdigit() for ch in text)


class TestEntryDate:
    def test_time_hidden_unless_flagged(self):
        moment = datetime(2024, 3, 4, 9, 30)

        assert format_entry_date(moment, False) == "2024-03-04"
        assert format_entry_date(moment, True) == "2024-03-04 09:30"


class TestStyles:
    def test_value_style(self):
        assert value_style(250.0) == "green"
        assert value_style(-1.0) == "red"
        assert value_style(0) == "dim"
        assert value_style(None) == "dim"

    def test_outcome_display(self):
        assert outcome_display("win")["style"] == "green"
        assert outcome_display("loss")["style"] == "red"
        assert outcome_display("neutral")["icon"] == "⚪"
        assert outcome_display("unknown") == outcome_display("neutral")
