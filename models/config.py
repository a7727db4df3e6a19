"""
Configuration data models for WhatsApp2Excel.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Any, Optional

from models.data_models import SheetMode


# UTC 偏移允许范围（与常见时区定义一致）
MAX_UTC_OFFSET = timedelta(hours=14)

_OFFSET_RE = re.compile(r"^(?:UTC|GMT)?\s*([+-])?(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


def parse_utc_offset(text: Optional[str]) -> Optional[timedelta]:
    """Parse offsets such as "+03:00", "-0530", "3", "UTC+2".

    Raises:
        ValueError: if the text is not an offset
    """
    if text is None:
        return None
    if isinstance(text, timedelta):
        return text
    s = str(text).strip()
    if not s:
        return None
    m = _OFFSET_RE.match(s)
    if not m:
        raise ValueError(f"Invalid UTC offset: {text}")
    sign, hours, minutes = m.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return -offset if sign == "-" else offset


def format_utc_offset(offset: Optional[timedelta]) -> Optional[str]:
    if offset is None:
        return None
    total = int(offset.total_seconds() // 60)
    sign = "-" if total < 0 else "+"
    total = abs(total)
    return f"{sign}{total // 60:02d}:{total % 60:02d}"


def parse_day(value) -> Optional[date]:
    """Parse a yyyy-mm-dd day bound (date objects pass through)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass
class ParserConfig:
    """Options consumed by the parser and the message filters."""
    input_path: str = ""
    # 回退解析使用的区域设置（例如 ar-SA、en-US）；None 表示不变区域
    culture: Optional[str] = None
    timezone_offset: Optional[timedelta] = None
    skip_system: bool = False
    from_date: Optional[date] = None
    to_date: Optional[date] = None


@dataclass
class OutputConfig:
    """Output configuration."""
    path: str = ""
    sheet_mode: SheetMode = SheetMode.DAY
    force_rtl: bool = False
    media_directory: Optional[str] = None
    move_unused_media: bool = False
    unused_media_dirname: str = "unused"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    # 为空时只输出到控制台
    file: str = "./logs/whatsapp2excel.log"
    max_size: str = "10MB"


@dataclass
class AppConfig:
    """Main application configuration."""
    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        errors = []

        offset = self.parser.timezone_offset
        if offset is not None and abs(offset) > MAX_UTC_OFFSET:
            errors.append("timezone offset must be between -14:00 and +14:00")

        if self.parser.from_date and self.parser.to_date and self.parser.from_date > self.parser.to_date:
            errors.append("from_date must not be after to_date")

        if not isinstance(self.output.sheet_mode, SheetMode):
            errors.append("sheet_mode must be one of: day, all")

        if not isinstance(getattr(logging, str(self.logging.level).upper(), None), int):
            errors.append(f"unknown logging level: {self.logging.level}")

        if not self.output.unused_media_dirname or any(sep in self.output.unused_media_dirname for sep in "/\\"):
            errors.append("unused_media_dirname must be a plain directory name")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "input": {
                "path": self.parser.input_path,
                "culture": self.parser.culture,
                "timezone": format_utc_offset(self.parser.timezone_offset),
                "skip_system": self.parser.skip_system,
                "from_date": self.parser.from_date.isoformat() if self.parser.from_date else None,
                "to_date": self.parser.to_date.isoformat() if self.parser.to_date else None,
            },
            "output": {
                "path": self.output.path,
                "sheet_mode": self.output.sheet_mode.value,
                "force_rtl": self.output.force_rtl,
                "media_directory": self.output.media_directory,
                "move_unused_media": self.output.move_unused_media,
                "unused_media_dirname": self.output.unused_media_dirname,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "max_size": self.logging.max_size,
            }
        }
