"""
Storage manager for exporting grouped chat messages to an Excel workbook.
One worksheet per SheetGroup, columns Date | Sender | Message [| Media].
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from models.config import OutputConfig
from models.data_models import ExportRow, SheetGroup


DATE_FORMAT = "yyyy-mm-dd hh:mm:ss"
BASE_COLUMNS = (("Date", 20), ("Sender", 28), ("Message", 90))
MEDIA_COLUMN = ("Media", 40)
# Excel 工作表名称限制
MAX_SHEET_TITLE = 31
_INVALID_TITLE_CHARS = set('[]:*?/\\')


class StorageManager:
    """
    Handles persistence of grouped messages to an .xlsx file.
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        self.logger = logging.getLogger(__name__)
        self.config = output_config or OutputConfig()

    @property
    def with_media_column(self) -> bool:
        return bool(self.config.media_directory)

    def _ensure_output_dir(self, path: Path) -> None:
        """Create the parent directory of the output file if needed."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create output directory: {e}")
            raise

    @staticmethod
    def _sheet_title(key: str, used: set) -> str:
        title = "".join("_" if ch in _INVALID_TITLE_CHARS else ch for ch in key)[:MAX_SHEET_TITLE] or "Sheet"
        candidate, n = title, 2
        while candidate.lower() in used:
            suffix = f" ({n})"
            candidate = title[:MAX_SHEET_TITLE - len(suffix)] + suffix
            n += 1
        used.add(candidate.lower())
        return candidate

    @staticmethod
    def _clean_text(text: Optional[str]) -> str:
        """Strip characters that are illegal in the workbook XML."""
        return ILLEGAL_CHARACTERS_RE.sub("", text or "")

    @staticmethod
    def _excel_datetime(ts: datetime) -> datetime:
        # openpyxl 不支持带时区的 datetime：换算为本机本地时间后去掉 tzinfo
        if ts.tzinfo is not None:
            return ts.astimezone().replace(tzinfo=None)
        return ts

    def _setup_worksheet(self, ws) -> None:
        columns = list(BASE_COLUMNS)
        if self.with_media_column:
            columns.append(MEDIA_COLUMN)
        for idx, (title, width) in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=idx, value=title)
            cell.font = Font(bold=True)
            ws.column_dimensions[get_column_letter(idx)].width = width
        ws.freeze_panes = "A2"

    def _write_row(self, ws, row_idx: int, row: ExportRow) -> None:
        date_cell = ws.cell(row=row_idx, column=1, value=self._excel_datetime(row.timestamp))
        date_cell.number_format = DATE_FORMAT

        sender_cell = ws.cell(row=row_idx, column=2, value=self._clean_text(row.message.sender))
        sender_cell.data_type = "s"

        msg_cell = ws.cell(row=row_idx, column=3, value=self._clean_text(row.message.body))
        # 以 "=" 开头的正文按字符串保存，避免被当作公式
        msg_cell.data_type = "s"
        msg_cell.alignment = Alignment(wrap_text=True, vertical="top")

        if self.with_media_column and row.media_link:
            media_cell = ws.cell(row=row_idx, column=4, value=self._clean_text(Path(row.media_link).name))
            media_cell.data_type = "s"
            media_cell.hyperlink = Path(row.media_link).resolve().as_uri()
            media_cell.style = "Hyperlink"

    def write_group(self, wb: Workbook, group: SheetGroup, used_titles: set) -> None:
        ws = wb.create_sheet(title=self._sheet_title(group.key, used_titles))
        self._setup_worksheet(ws)
        for offset, row in enumerate(group.rows):
            self._write_row(ws, offset + 2, row)
        if group.right_to_left:
            ws.sheet_view.rightToLeft = True

    def save_workbook(self, groups: List[SheetGroup], output_path=None) -> Path:
        """Write all groups to the configured (or given) path.

        Returns the path of the written file.
        """
        target = output_path or self.config.path
        if not target:
            raise ValueError("Output path is not configured")
        path = Path(target)
        self._ensure_output_dir(path)

        wb = Workbook()
        wb.remove(wb.active)
        used_titles: set = set()
        for group in groups:
            self.write_group(wb, group, used_titles)
        if not groups:
            # 工作簿至少需要一个工作表
            self.logger.warning("No messages to write, creating an empty sheet")
            ws = wb.create_sheet(title="All")
            self._setup_worksheet(ws)

        wb.save(str(path))
        rows = sum(len(g.rows) for g in groups)
        self.logger.info(f"Saved {rows} messages in {max(1, len(groups))} sheet(s) to {path}")
        return path
