"""
Heuristic classification of message text: system notices and media references.
"""
import re
from typing import Optional

from models.data_models import UNKNOWN_MEDIA


SYSTEM_MESSAGE_STARTS = (
    "messages to this chat are now",
    "security code changed",
    "missed voice call",
    "missed video call",
    "تم إنشاء المجموعة",
    "قام بتغيير صورة المجموعة",
    "قام بتغيير وصف المجموعة",
    "تم تغيير رقم الهاتف",
    "أصبحت الرسائل الآن",
)

MEDIA_PLACEHOLDERS = (
    "<media omitted>",
    "المرفق غير متاح",
    "image omitted",
    "video omitted",
    "audio omitted",
    "document omitted",
    "sticker omitted",
    "gif omitted",
    "(file attached)",
    "<attached:",
)

MEDIA_EXTENSIONS = (
    # images
    "jpg", "jpeg", "png", "gif", "webp", "heic",
    # video
    "mp4", "mov", "3gp",
    # audio
    "mp3", "opus", "m4a", "aac", "ogg", "wav",
    # documents
    "pdf", "docx", "doc", "xlsx", "xls", "pptx", "ppt", "txt", "vcf",
    # archives
    "zip", "rar", "7z",
)

FILE_LIKE_PATTERN = re.compile(
    r"\b[\w\-]+\.(?:" + "|".join(MEDIA_EXTENSIONS) + r")\b",
    re.IGNORECASE,
)

_SYSTEM_PREFIXES = tuple(p.casefold() for p in SYSTEM_MESSAGE_STARTS)


def is_system_message(text: Optional[str]) -> bool:
    """True when the trimmed text starts with a known system-notice phrase."""
    if not text or not text.strip():
        return False
    return text.strip().casefold().startswith(_SYSTEM_PREFIXES)


def has_media_placeholder(text: Optional[str]) -> bool:
    if not text:
        return False
    folded = text.casefold()
    return any(p in folded for p in MEDIA_PLACEHOLDERS)


def find_file_token(text: Optional[str]) -> Optional[str]:
    """First filename-like token with a known media extension."""
    if not text:
        return None
    m = FILE_LIKE_PATTERN.search(text)
    return m.group(0) if m else None


def detect_media_token(text: Optional[str]) -> Optional[str]:
    """Detect a media reference in a line of message text.

    函数级注释：
    - 命中占位短语时：返回文件名；找不到文件名则返回 UNKNOWN_MEDIA 哨兵；
    - 未命中占位短语时：正文中直接出现的文件名同样返回；
    - 否则返回 None（无媒体）。

    Returns:
        filename token, UNKNOWN_MEDIA, or None
    """
    if not text or not text.strip():
        return None
    token = find_file_token(text)
    if has_media_placeholder(text):
        return token or UNKNOWN_MEDIA
    return token
