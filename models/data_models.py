"""
Core data models for WhatsApp2Excel.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


# 占位符已出现但无法识别文件名时使用的哨兵值（区别于“无媒体”）
UNKNOWN_MEDIA = "<media>"


class MediaStatus(Enum):
    """Three-way media state of a message."""
    NONE = "none"
    NAMED = "named"
    UNNAMED = "unnamed"


class SheetMode(Enum):
    """How messages are distributed over worksheets."""
    DAY = "day"
    ALL = "all"

    @classmethod
    def parse(cls, value) -> "SheetMode":
        """Accept enum members or strings such as "all", "Day"; anything else means DAY."""
        if isinstance(value, SheetMode):
            return value
        return cls.ALL if str(value or "").strip().lower() == "all" else cls.DAY


@dataclass(frozen=True)
class HeaderMatch:
    """Raw captures of a line that looks like the start of a message."""
    date: str
    time: str
    ampm: Optional[str]
    sender: str
    remainder: str


@dataclass(frozen=True)
class ChatMessage:
    """A sealed chat message."""
    timestamp: datetime
    sender: str
    body: str
    is_system: bool = False
    # None: 无媒体；UNKNOWN_MEDIA: 有媒体但文件名未知；其他: 文件名
    media_token: Optional[str] = None

    @property
    def media_status(self) -> MediaStatus:
        if not self.media_token:
            return MediaStatus.NONE
        if self.media_token == UNKNOWN_MEDIA:
            return MediaStatus.UNNAMED
        return MediaStatus.NAMED


@dataclass
class ExportRow:
    """One worksheet row: the message plus what the writer needs to render it."""
    group_key: str
    message: ChatMessage
    timestamp: datetime
    media_link: Optional[str] = None


@dataclass
class SheetGroup:
    """Messages sharing one worksheet.

    函数级注释：
    - arabic_count 为包含阿拉伯字符（发送者或正文）的消息计数；
    - right_to_left 一旦被置为 True 就不会再被撤销（单调）。
    """
    key: str
    rows: List[ExportRow] = field(default_factory=list)
    arabic_count: int = 0
    right_to_left: bool = False


@dataclass
class ExportSummary:
    """Result of one export run."""
    output_path: Path
    messages_written: int
    groups: int
    media_linked: int = 0
    media_moved: int = 0
