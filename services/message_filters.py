"""
Utilities to filter ChatMessage streams by system flag and calendar day.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional

from models.data_models import ChatMessage


def apply_timezone(ts: datetime, offset: Optional[timedelta]) -> datetime:
    """Reinterpret the transcript's wall-clock time under a fixed UTC offset.

    Without an offset the naive timestamp is returned unchanged.
    """
    if offset is None:
        return ts
    return ts.replace(tzinfo=timezone(offset))


def filter_messages(
    messages: Iterable[ChatMessage],
    skip_system: bool = False,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    timezone_offset: Optional[timedelta] = None,
) -> Iterator[ChatMessage]:
    """Lazily filter messages.

    - skip_system: drop messages flagged as system notices
    - from_date/to_date: inclusive bounds on the calendar day of the
      (offset-applied) timestamp
    """
    for m in messages:
        if skip_system and m.is_system:
            continue
        day = apply_timezone(m.timestamp, timezone_offset).date()
        if from_date and day < from_date:
            continue
        if to_date and day > to_date:
            continue
        yield m
