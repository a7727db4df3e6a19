"""
Timestamp resolution for header captures.

Exports differ by device locale and app version, so an ordered list of
explicit formats is tried first (day-first before month-first) and only
then a culture-aware best-effort parse via dateutil.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from dateutil import parser as dateparser


TIMESTAMP_FORMATS: Tuple[str, ...] = (
    "%d/%m/%y, %H:%M", "%d/%m/%y, %H:%M:%S",
    "%d/%m/%Y, %H:%M", "%d/%m/%Y, %H:%M:%S",
    "%d/%m/%y, %I:%M %p", "%d/%m/%y, %I:%M:%S %p",
    "%d/%m/%Y, %I:%M %p", "%d/%m/%Y, %I:%M:%S %p",
    "%m/%d/%y, %H:%M", "%m/%d/%y, %H:%M:%S",
    "%m/%d/%Y, %H:%M", "%m/%d/%Y, %H:%M:%S",
    "%m/%d/%y, %I:%M %p", "%m/%d/%y, %I:%M:%S %p",
    "%m/%d/%Y, %I:%M %p", "%m/%d/%Y, %I:%M:%S %p",
)

# 短日期为“月/日/年”的区域设置；未指定区域时按不变区域（同样为月在前）处理
MONTH_FIRST_CULTURES = frozenset({
    "", "invariant", "iv", "en", "en-us", "en-ph", "en-bz", "en-as", "en-gu", "en-mh",
    "en-fm", "en-mp", "en-pr", "en-um", "en-vi", "es-us", "fil", "fil-ph",
})


def build_stamp(date_part: str, time_part: str, ampm: Optional[str] = None) -> str:
    """Join captures into the string the formats are written against."""
    stamp = f"{date_part.strip()}, {time_part.strip()}"
    return f"{stamp} {ampm}" if ampm else stamp


def try_parse_exact(stamp: str, fmt: str) -> Optional[datetime]:
    try:
        return datetime.strptime(stamp, fmt)
    except ValueError:
        return None


class TimestampResolver:
    """Turns raw date/time captures into naive datetimes."""

    def __init__(self, culture: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.culture = (culture or "").strip()
        self.dayfirst = self.is_day_first_culture(self.culture)

    @staticmethod
    def is_day_first_culture(culture: Optional[str]) -> bool:
        """Return True when the culture's short date puts the day first."""
        name = (culture or "").strip().replace("_", "-").lower()
        return name not in MONTH_FIRST_CULTURES

    def resolve(self, date_part: str, time_part: str, ampm: Optional[str] = None) -> Optional[datetime]:
        """Resolve captures to a datetime, or None when nothing parses.

        Args:
            date_part: e.g. "19/7/2025"
            time_part: e.g. "9:46" or "21:46:05"
            ampm: normalized meridiem ("AM"/"PM") or None

        Returns:
            datetime or None
        """
        stamp = build_stamp(date_part, time_part, ampm)
        for fmt in TIMESTAMP_FORMATS:
            parsed = try_parse_exact(stamp, fmt)
            if parsed is not None:
                return parsed
        return self.parse_with_culture(stamp)

    def parse_with_culture(self, stamp: str) -> Optional[datetime]:
        """Best-effort fallback honouring the culture's day/month order."""
        try:
            return dateparser.parse(stamp, dayfirst=self.dayfirst)
        except (ValueError, OverflowError) as e:
            self.logger.debug(f"Unresolvable timestamp '{stamp}' (culture={self.culture or 'invariant'}): {e}")
            return None
