"""
Simple progress reporter for CLI/console UI.

函数级注释：
- ProgressReporter 提供开始/推进/更新/结束接口；
- 解析进度按读取字节数计算百分比，每跨过一个 10% 台阶输出一次 INFO 日志，
  其余百分比变化只输出 DEBUG 日志，避免刷屏；
- 所有输出走 logging，便于与文件日志统一。
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ProgressState:
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    status: str = "idle"
    total_bytes: int = 0
    bytes_read: int = 0
    percent: int = -1
    messages_parsed: int = 0


class ProgressReporter:
    def __init__(self, logger: Optional[logging.Logger] = None, step_percent: int = 10):
        self.logger = logger or logging.getLogger(__name__)
        self.state = ProgressState()
        self.step_percent = max(1, int(step_percent))

    def start(self, total_bytes: int = 0) -> None:
        self.state = ProgressState()
        self.state.started_at = datetime.now()
        self.state.status = "running"
        self.state.total_bytes = max(0, int(total_bytes or 0))
        self.logger.info("Parsing started")

    def advance(self, bytes_delta: int) -> None:
        """Record bytes consumed and log when the percentage moves."""
        if self.state.total_bytes <= 0:
            return
        self.state.bytes_read = min(self.state.total_bytes, self.state.bytes_read + max(0, bytes_delta))
        pct = int(self.state.bytes_read * 100 / self.state.total_bytes)
        if pct == self.state.percent:
            return
        previous = self.state.percent
        self.state.percent = pct
        if previous < 0 or pct // self.step_percent != previous // self.step_percent:
            self.logger.info(f"Parsing... {pct}%")
        else:
            self.logger.debug(f"Parsing... {pct}%")

    def update(self, messages_parsed_delta: int = 0) -> None:
        if messages_parsed_delta:
            self.state.messages_parsed += max(0, messages_parsed_delta)

    def finish(self, success: bool = True) -> None:
        if success and self.state.total_bytes > 0 and self.state.percent < 100:
            self.state.bytes_read = self.state.total_bytes
            self.state.percent = 100
            self.logger.info("Parsing... 100%")
        self.state.finished_at = datetime.now()
        self.state.status = "success" if success else "failed"
        duration = (self.state.finished_at - self.state.started_at).total_seconds() if self.state.started_at else 0.0
        self.logger.info(
            f"Parsing finished, status: {self.state.status}, took {duration:.2f}s, messages: {self.state.messages_parsed}"
        )
