"""
Main controller orchestrating parsing, filtering, grouping and workbook export.
"""
import logging
from functools import partial
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from models.config import AppConfig
from models.data_models import ChatMessage, ExportSummary, MediaStatus, SheetGroup
from services.media_helper import move_unused_media, resolve_media_link
from services.message_filters import filter_messages
from services.message_grouper import MessageGrouper
from services.message_parser import ChatParser
from services.storage_manager import StorageManager
from ui.progress import ProgressReporter


class MainController:
    """Coordinates the overall export workflow."""

    def __init__(self, config: AppConfig, reporter: Optional[ProgressReporter] = None):
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.parser = ChatParser(config.parser, reporter=reporter)
        self.storage = StorageManager(config.output)
        # 整个聊天记录中引用过的媒体文件名（过滤之前收集）
        self.referenced_tokens: Set[str] = set()

    def _build_grouper(self) -> MessageGrouper:
        media_dir = self.config.output.media_directory
        resolver = partial(resolve_media_link, media_dir) if media_dir else None
        return MessageGrouper(
            sheet_mode=self.config.output.sheet_mode,
            force_rtl=self.config.output.force_rtl,
            timezone_offset=self.config.parser.timezone_offset,
            media_resolver=resolver,
        )

    def _track_media(self, messages: Iterable[ChatMessage]) -> Iterator[ChatMessage]:
        for message in messages:
            if message.media_status == MediaStatus.NAMED:
                self.referenced_tokens.add(message.media_token)
            yield message

    def build_groups(self, input_path) -> List[SheetGroup]:
        """Parse the export and return fully built sheet groups."""
        opts = self.config.parser
        self.referenced_tokens = set()
        messages = self._track_media(self.parser.parse_chat(input_path))
        filtered = filter_messages(
            messages,
            skip_system=opts.skip_system,
            from_date=opts.from_date,
            to_date=opts.to_date,
            timezone_offset=opts.timezone_offset,
        )
        return self._build_grouper().group(filtered)

    def _referenced_media_paths(self, media_dir, linked: List[str]) -> List[str]:
        """Files referenced anywhere in the transcript, including filtered-out messages."""
        paths = set(linked)
        for token in self.referenced_tokens:
            path = resolve_media_link(media_dir, token)
            if path:
                paths.add(path)
        return sorted(paths)

    def run(self) -> ExportSummary:
        """Run one export: input file -> workbook, then optional media cleanup.

        Raises:
            FileNotFoundError: if the input transcript does not exist
            ValueError: if input or output path is missing
        """
        if not self.config.parser.input_path:
            raise ValueError("Input path is not configured")
        if not self.config.output.path:
            raise ValueError("Output path is not configured")

        input_path = Path(self.config.parser.input_path)
        if not input_path.is_file():
            raise FileNotFoundError(f"Chat export not found: {input_path}")

        groups = self.build_groups(input_path)
        output_path = self.storage.save_workbook(groups, self.config.output.path)

        linked = [row.media_link for g in groups for row in g.rows if row.media_link]
        moved = 0
        media_dir = self.config.output.media_directory
        if media_dir and self.config.output.move_unused_media:
            moved = move_unused_media(
                media_dir,
                self._referenced_media_paths(media_dir, linked),
                self.config.output.unused_media_dirname,
                keep_paths=[str(input_path), str(output_path)],
            )

        return ExportSummary(
            output_path=output_path,
            messages_written=sum(len(g.rows) for g in groups),
            groups=len(groups),
            media_linked=len(linked),
            media_moved=moved,
        )
