"""
Grouping of filtered messages into worksheets, with the right-to-left heuristic.

Sheet name and direction are fixed once rows are written, so every group is
fully built (rows, media links, direction) before the writer runs.
"""
import logging
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional

from models.data_models import ChatMessage, ExportRow, MediaStatus, SheetGroup, SheetMode
from services.message_filters import apply_timezone


ARABIC_RANGES = (
    ("\u0600", "\u06ff"),
    ("\u0750", "\u077f"),
    ("\u08a0", "\u08ff"),
)

# 单个分组内含阿拉伯字符的消息数达到该阈值即切换为从右到左
RTL_THRESHOLD = 20

ALL_SHEET_NAME = "All"


def contains_arabic(text: Optional[str]) -> bool:
    if not text:
        return False
    return any(lo <= ch <= hi for ch in text for lo, hi in ARABIC_RANGES)


class MessageGrouper:
    """Builds SheetGroup objects from a message stream."""

    def __init__(
        self,
        sheet_mode: SheetMode = SheetMode.DAY,
        force_rtl: bool = False,
        timezone_offset: Optional[timedelta] = None,
        media_resolver: Optional[Callable[[str], Optional[str]]] = None,
        rtl_threshold: int = RTL_THRESHOLD,
    ):
        self.logger = logging.getLogger(__name__)
        self.sheet_mode = sheet_mode
        self.force_rtl = force_rtl
        self.timezone_offset = timezone_offset
        self.media_resolver = media_resolver
        self.rtl_threshold = rtl_threshold

    def group_key(self, message: ChatMessage) -> str:
        if self.sheet_mode == SheetMode.ALL:
            return ALL_SHEET_NAME
        return apply_timezone(message.timestamp, self.timezone_offset).date().isoformat()

    def resolve_media(self, message: ChatMessage) -> Optional[str]:
        if self.media_resolver is None or message.media_status != MediaStatus.NAMED:
            return None
        return self.media_resolver(message.media_token)

    def add(self, group: SheetGroup, message: ChatMessage) -> ExportRow:
        """Append a message to its group and update the running Arabic count."""
        row = ExportRow(
            group_key=group.key,
            message=message,
            timestamp=apply_timezone(message.timestamp, self.timezone_offset),
            media_link=self.resolve_media(message),
        )
        group.rows.append(row)
        if contains_arabic(message.sender) or contains_arabic(message.body):
            group.arabic_count += 1
        if self.force_rtl or group.arabic_count >= self.rtl_threshold:
            group.right_to_left = True
        return row

    def group(self, messages: Iterable[ChatMessage]) -> List[SheetGroup]:
        """Group messages in order of first appearance of each key.

        Returns:
            List of SheetGroup; in ALL mode at most one group
        """
        groups: Dict[str, SheetGroup] = {}
        for message in messages:
            key = self.group_key(message)
            group = groups.get(key)
            if group is None:
                group = SheetGroup(key=key, right_to_left=self.force_rtl)
                groups[key] = group
            self.add(group, message)
        rtl = sum(1 for g in groups.values() if g.right_to_left)
        self.logger.debug(f"Grouped messages into {len(groups)} sheet(s), {rtl} right-to-left")
        return list(groups.values())
