"""
Pytest configuration and shared fixtures for WhatsApp2Excel tests.
"""
import logging
import os
import sys

import pytest

"""
将项目根目录加入 Python 导入路径，确保在以 tests 目录为起点执行时，
可以正常导入位于项目根目录下的内部模块（如 services/*）。
"""
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True)
def setup_logging():
    """Setup logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@pytest.fixture
def sample_chat_lines():
    """A short export mixing both header styles, continuations and a system notice."""
    return [
        "Some preamble line before any header",
        "19/7/2025, 9:46 am - Alice: Hello there",
        "how are you?",
        "19/7/2025, 9:47 am - Bob: Security code changed",
        "[20/7/2025, 10:00:05 PM] Alice: <Media omitted> IMG-20250720-WA0001.jpg",
        "20/7/2025, 22:01 - Bob: ok",
    ]


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "input": {
            "path": "chat.txt",
            "culture": "ar-SA",
            "timezone": "+03:00",
            "skip_system": True,
            "from_date": "2025-07-01",
            "to_date": "2025-07-31",
        },
        "output": {
            "path": "chat.xlsx",
            "sheet_mode": "all",
            "force_rtl": True,
            "media_directory": "media",
            "move_unused_media": False,
        },
        "logging": {
            "level": "DEBUG",
            "file": "",
            "max_size": "1MB",
        },
    }
