"""Tests for the recurrence rule model and RRULE interop."""

from datetime import datetime

import pytest

from cadence.core.frequency import Frequency
from cadence.core.recurrence import RecurrenceRule, parse_rrule, to_rrule


class TestFrequency:
    def test_parse_case_insensitive(self):
        assert Frequency.parse("Weekly") is Frequency.WEEKLY
        assert Frequency.parse(" MONTHLY ") is Frequency.MONTHLY

    def test_parse_unknown_falls_back_to_daily(self):
        assert Frequency.parse("fortnightly") is Frequency.DAILY
        assert Frequency.parse(None) is Frequency.DAILY


class TestRecurrenceRule:
    def test_defaults(self):
        rule = RecurrenceRule(Frequency.WEEKLY)
        assert rule.interval == 1
        assert rule.days_of_week is None
        assert rule.day_of_month is None
        assert rule.end_date is None
        assert rule.count is None

    @pytest.mark.parametrize("bad", [0, -3])
    def test_interval_clamped(self, bad):
        assert RecurrenceRule(Frequency.DAILY, interval=bad).interval == 1

    def test_days_of_week_normalised(self):
        rule = RecurrenceRule(Frequency.WEEKLY, days_of_week=(6, 2, 2, 9, 0))
        assert rule.days_of_week == (2, 6)

    def test_empty_days_of_week_becomes_none(self):
        assert RecurrenceRule(Frequency.WEEKLY, days_of_week=(8,)).days_of_week is None

    def test_invalid_day_of_month_dropped(self):
        assert RecurrenceRule(Frequency.MONTHLY, day_of_month=32).day_of_month is None

    @pytest.mark.parametrize("bad", [0, -1])
    def test_non_positive_count_dropped(self, bad):
        assert RecurrenceRule(Frequency.DAILY, count=bad).count is None

    def test_display_string(self):
        assert RecurrenceRule.daily().display_string == "Daily"
        assert RecurrenceRule(Frequency.WEEKLY, interval=3).display_string == "Every 3 weeks"

    def test_next_occurrence(self):
        rule = RecurrenceRule(Frequency.MONTHLY, interval=2)
        assert rule.next_occurrence(datetime(2026, 12, 31)) == datetime(2027, 2, 28)

    def test_dict_roundtrip(self):
        rule = RecurrenceRule(
            Frequency.WEEKLY,
            interval=2,
            days_of_week=(2, 4),
            end_date=datetime(2026, 6, 1),
            count=10,
        )
        assert RecurrenceRule.from_dict(rule.to_dict()) == rule

    def test_to_dict_nullable_fields(self):
        assert RecurrenceRule.daily().to_dict() == {
            "frequency": "daily",
            "interval": 1,
            "days_of_week": None,
            "day_of_month": None,
            "end_date": None,
            "count": None,
        }

    def test_from_dict_clamps_invalid_values(self):
        rule = RecurrenceRule.from_dict(
            {"frequency": "hourly", "interval": "zero", "end_date": "soon", "day_of_month": "5", "count": "3"}
        )
        assert rule.frequency is Frequency.DAILY
        assert rule.interval == 1
        assert rule.end_date is None
        assert rule.day_of_month is None
        assert rule.count is None


class TestParseRrule:
    def test_weekly_with_days(self):
        rule = parse_rrule("RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE")
        assert rule == RecurrenceRule(Frequency.WEEKLY, interval=2, days_of_week=(2, 4))

    def test_bare_form_and_ordinal_byday(self):
        rule = parse_rrule("FREQ=MONTHLY;BYDAY=1FR")
        assert rule.frequency is Frequency.MONTHLY
        assert rule.days_of_week == (6,)

    def test_bymonthday_first_valid(self):
        rule = parse_rrule("FREQ=MONTHLY;BYMONTHDAY=-1,15,20")
        assert rule.day_of_month == 15

    @pytest.mark.parametrize(
        "until,expected",
        [
            ("20260301", datetime(2026, 3, 1)),
            ("20260301T120000", datetime(2026, 3, 1, 12)),
            ("20260301T120000Z", datetime(2026, 3, 1, 12)),
        ],
    )
    def test_until_formats(self, until, expected):
        assert parse_rrule(f"FREQ=DAILY;UNTIL={until}").end_date == expected

    def test_interval_clamped(self):
        assert parse_rrule("FREQ=DAILY;INTERVAL=0").interval == 1

    def test_count(self):
        assert parse_rrule("FREQ=DAILY;COUNT=3").count == 3

    @pytest.mark.parametrize("count", ["0", "-2", "many"])
    def test_invalid_count_ignored(self, count):
        assert parse_rrule(f"FREQ=DAILY;COUNT={count}").count is None

    @pytest.mark.parametrize("text", ["", "INTERVAL=2", "FREQ=HOURLY", "garbage"])
    def test_missing_or_unknown_freq(self, text):
        assert parse_rrule(text) is None

    def test_to_rrule(self):
        rule = RecurrenceRule(
            Frequency.WEEKLY, interval=2, days_of_week=(2, 6), end_date=datetime(2026, 3, 1)
        )
        assert to_rrule(rule) == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,FR;UNTIL=20260301T000000"

    def test_to_rrule_with_count(self):
        rule = RecurrenceRule(Frequency.DAILY, count=5)
        assert to_rrule(rule) == "FREQ=DAILY;COUNT=5"
        assert parse_rrule(to_rrule(rule)) == rule

    def test_to_rrule_parses_back(self):
        rule = RecurrenceRule(Frequency.MONTHLY, day_of_month=31)
        assert parse_rrule(to_rrule(rule)) == rule
