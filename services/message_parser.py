"""
Message parsing for exported WhatsApp transcripts.

This module turns the raw line stream of a chat export into ChatMessage
records. A message is only complete once the next header line (or the end
of input) is seen, so parsing is a two-state machine over the lines:

    NoMessage --header--> InMessage --header--> InMessage (previous sealed)
    InMessage --other-->  InMessage (line appended)
    NoMessage --other-->  NoMessage (line dropped)
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from models.config import ParserConfig
from models.data_models import ChatMessage, HeaderMatch
from services.header_matcher import match_headers
from services.message_classifier import detect_media_token, is_system_message
from services.text_normalizer import normalize_digits_and_spaces
from services.timestamp_resolver import TimestampResolver
from ui.progress import ProgressReporter


@dataclass
class _MessageDraft:
    """The open message; only ever touched by the generator that owns it."""
    timestamp: datetime
    sender: str
    lines: List[str]
    is_system: bool = False
    media_token: Optional[str] = None

    def append(self, line: str) -> None:
        self.lines.append(line)
        if not self.is_system and is_system_message(line):
            self.is_system = True
        if not self.media_token:
            self.media_token = detect_media_token(line)

    def seal(self) -> ChatMessage:
        return ChatMessage(
            timestamp=self.timestamp,
            sender=self.sender,
            body="\n".join(self.lines).rstrip(),
            is_system=self.is_system,
            media_token=self.media_token or None,
        )


class ChatParser:
    """Parses exported chat text into ChatMessage records."""

    def __init__(self, options: Optional[ParserConfig] = None, reporter: Optional[ProgressReporter] = None):
        self.logger = logging.getLogger(__name__)
        self.options = options or ParserConfig()
        self.resolver = TimestampResolver(self.options.culture)
        self.reporter = reporter

    def try_parse_header(self, raw_line: str) -> Optional[Tuple[datetime, HeaderMatch]]:
        """Return (timestamp, header) when the line starts a new message.

        A grammar whose date/time does not resolve is skipped and the next
        grammar is tried; if none resolves the line is a continuation line.
        """
        line = normalize_digits_and_spaces(raw_line)
        for header in match_headers(line):
            ts = self.resolver.resolve(header.date, header.time, header.ampm)
            if ts is not None:
                return ts, header
        return None

    def parse_lines(self, lines: Iterable[str]) -> Iterator[ChatMessage]:
        """Lazily assemble messages from an iterable of lines.

        Args:
            lines: raw lines, with or without trailing newlines

        Yields:
            ChatMessage, each sealed when the next header or end of input is seen
        """
        current: Optional[_MessageDraft] = None
        dropped = 0

        for raw in lines:
            line = raw.rstrip("\r\n")
            parsed = self.try_parse_header(line)
            if parsed is not None:
                if current is not None:
                    yield current.seal()
                ts, header = parsed
                current = _MessageDraft(timestamp=ts, sender=header.sender, lines=[])
                current.append(header.remainder)
            elif current is not None:
                current.append(line)
            else:
                dropped += 1

        if current is not None:
            yield current.seal()
        if dropped:
            self.logger.debug(f"Dropped {dropped} line(s) before the first message header")

    def parse_chat(self, path) -> Iterator[ChatMessage]:
        """Stream messages from a UTF-8 (BOM tolerant) export file.

        The file is opened lazily on first iteration and read top to bottom once.
        """
        path = Path(path)
        reporter = self.reporter
        if reporter is not None:
            reporter.start(os.path.getsize(path))

        def _lines(handle) -> Iterator[str]:
            for line in handle:
                if reporter is not None:
                    reporter.advance(len(line.encode("utf-8")))
                yield line

        success = False
        with path.open("r", encoding="utf-8-sig", errors="replace", newline=None) as f:
            try:
                for message in self.parse_lines(_lines(f)):
                    if reporter is not None:
                        reporter.update(messages_parsed_delta=1)
                    yield message
                success = True
            finally:
                if reporter is not None:
                    reporter.finish(success=success)
