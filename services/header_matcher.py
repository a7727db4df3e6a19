"""
Recognition of message header lines.

Two export styles are supported, tried in this order:

    19/7/2025, 9:46 am - Alice: Hello
    [19/7/2025, 9:46:12 AM] Alice: Hello

Day/month ordering is not decided here; see services.timestamp_resolver.
"""
import re
from typing import Iterator, Optional

from models.data_models import HeaderMatch


LINE_START_PATTERNS = (
    # 1) 19/7/2025, 9:46 am - Alice: text   (hyphen or en-dash)
    re.compile(
        r"^(?P<d>\d{1,2}/\d{1,2}/\d{2,4}),\s*(?P<t>\d{1,2}:\d{2}(?::\d{2})?)\s*"
        r"(?P<ampm>(?:[AaPp]\.?[Mm]\.?)?)\s*[-–]\s*(?P<name>.+?):\s*(?P<msg>.*)$"
    ),
    # 2) [19/7/2025, 9:46 am] Alice: text
    re.compile(
        r"^\[\s*(?P<d>\d{1,2}/\d{1,2}/\d{2,4}),\s*(?P<t>\d{1,2}:\d{2}(?::\d{2})?)\s*"
        r"(?P<ampm>(?:[AaPp]\.?[Mm]\.?)?)\s*\]\s*(?P<name>.+?):\s*(?P<msg>.*)$"
    ),
)


def normalize_ampm(raw: Optional[str]) -> Optional[str]:
    """ "a.m." -> "AM"; empty -> None."""
    if not raw:
        return None
    token = raw.strip().replace(".", "").upper()
    return token or None


def match_headers(line: str) -> Iterator[HeaderMatch]:
    """Yield header captures for every grammar that matches, in priority order.

    The caller stops at the first candidate whose timestamp resolves.
    """
    if not line:
        return
    for rx in LINE_START_PATTERNS:
        m = rx.match(line)
        if not m:
            continue
        sender = m.group("name").strip()
        if not sender:
            continue
        yield HeaderMatch(
            date=m.group("d").strip(),
            time=m.group("t").strip(),
            ampm=normalize_ampm(m.group("ampm")),
            sender=sender,
            remainder=m.group("msg"),
        )


def match_header(line: str) -> Optional[HeaderMatch]:
    """Return the first matching header capture, or None for continuation lines."""
    return next(match_headers(line), None)
