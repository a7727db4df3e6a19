from datetime import datetime

import pytest

from services.timestamp_resolver import TIMESTAMP_FORMATS, TimestampResolver, build_stamp


@pytest.mark.unit
class TestTimestampResolver:
    def setup_method(self):
        self.resolver = TimestampResolver()

    def test_sixteen_explicit_formats(self):
        assert len(TIMESTAMP_FORMATS) == 16
        assert len(set(TIMESTAMP_FORMATS)) == 16

    def test_build_stamp(self):
        assert build_stamp("19/7/2025", "9:46", "AM") == "19/7/2025, 9:46 AM"
        assert build_stamp("19/7/2025", "21:46") == "19/7/2025, 21:46"

    def test_day_first_twelve_hour(self):
        assert self.resolver.resolve("19/7/2025", "9:46", "AM") == datetime(2025, 7, 19, 9, 46)
        assert self.resolver.resolve("19/7/2025", "9:46", "PM") == datetime(2025, 7, 19, 21, 46)
        assert self.resolver.resolve("19/7/2025", "12:05", "AM") == datetime(2025, 7, 19, 0, 5)

    def test_ambiguous_date_prefers_day_first(self):
        assert self.resolver.resolve("1/2/2025", "9:46") == datetime(2025, 2, 1, 9, 46)

    def test_month_first_when_day_first_impossible(self):
        assert self.resolver.resolve("7/19/25", "21:46:05") == datetime(2025, 7, 19, 21, 46, 5)

    def test_two_digit_year(self):
        assert self.resolver.resolve("19/7/25", "9:46") == datetime(2025, 7, 19, 9, 46)

    @pytest.mark.parametrize("culture", [None, "ar-SA", "en-US"])
    def test_invalid_month_never_resolves(self, culture):
        resolver = TimestampResolver(culture)
        assert resolver.resolve("19/13/2025", "9:46", "AM") is None

    def test_fallback_parse_when_no_explicit_format_fits(self):
        assert self.resolver.resolve("2025-07-19", "09:46") == datetime(2025, 7, 19, 9, 46)

    def test_fallback_honours_culture_order(self):
        us = TimestampResolver("en-US")
        de = TimestampResolver("de-DE")
        assert us.parse_with_culture("03/04/2025 10:00") == datetime(2025, 3, 4, 10, 0)
        assert de.parse_with_culture("03/04/2025 10:00") == datetime(2025, 4, 3, 10, 0)

    def test_culture_day_order(self):
        assert TimestampResolver.is_day_first_culture("ar-SA") is True
        assert TimestampResolver.is_day_first_culture("en_US") is False
        assert TimestampResolver.is_day_first_culture(None) is False

    def test_garbage_returns_none(self):
        assert self.resolver.parse_with_culture("not a date at all") is None
