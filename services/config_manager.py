"""
Configuration manager for loading and validating application configuration.
"""
import os
import json
import logging
from typing import Dict, Any, Optional

import yaml

from models.config import AppConfig, parse_day, parse_utc_offset
from models.data_models import SheetMode


# 旧版 settings.json 使用的扁平 PascalCase 键 -> (分组, 字段)
LEGACY_KEYS = {
    "InputPath": ("input", "path"),
    "OutputPath": ("output", "path"),
    "MediaDirectory": ("output", "media_directory"),
    "SkipSystem": ("input", "skip_system"),
    "CultureName": ("input", "culture"),
    "Timezone": ("input", "timezone"),
    "TimezoneOffset": ("input", "timezone"),
    "ForceRtl": ("output", "force_rtl"),
    "FromDate": ("input", "from_date"),
    "ToDate": ("input", "to_date"),
    "MoveNotUsedMedia": ("output", "move_unused_media"),
    "SheetMode": ("output", "sheet_mode"),
}


class ConfigManager:
    """Manages application configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default locations.
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[AppConfig] = None

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        possible_paths = [
            "config.yaml",
            "config.yml",
            "config.json",
            "settings.yaml",
            "settings.yml",
            "settings.json"
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return None

    def load_config(self) -> AppConfig:
        """
        Load configuration from file or create default configuration.

        Returns:
            AppConfig: Loaded or default configuration

        Raises:
            ValueError: If configuration validation fails
        """
        if self._config is not None:
            return self._config

        if self.config_path and os.path.exists(self.config_path):
            config_data = self._load_config_file(self.config_path)
            self._config = self._create_config_from_dict(config_data)
        else:
            if self.config_path:
                self.logger.warning(f"Configuration file not found, using defaults: {self.config_path}")
            self._config = AppConfig()

        self._config.validate()

        return self._config

    def _load_config_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load configuration data from file.

        Raises:
            ValueError: If file format is not supported
            FileNotFoundError: If file doesn't exist
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        file_ext = os.path.splitext(file_path)[1].lower()

        with open(file_path, 'r', encoding='utf-8-sig') as f:
            if file_ext in ['.yaml', '.yml']:
                data = yaml.safe_load(f) or {}
            elif file_ext == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {file_ext}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {file_path}")
        return data

    @staticmethod
    def _fold_legacy_keys(config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Move flat legacy keys (InputPath, SheetMode, ...) into the nested layout."""
        folded: Dict[str, Any] = {k: dict(v) if isinstance(v, dict) else v for k, v in config_data.items()}
        for key, (section, name) in LEGACY_KEYS.items():
            if key in config_data:
                if not isinstance(folded.get(section), dict):
                    folded[section] = {}
                folded[section].setdefault(name, config_data[key])
                folded.pop(key, None)
        return folded

    def _create_config_from_dict(self, config_data: Dict[str, Any]) -> AppConfig:
        """
        从字典数据创建 AppConfig 实例。

        处理流程：
        1) 兼容旧版扁平 settings.json（InputPath/OutputPath/SheetMode 等键）；
        2) 读取 input/output/logging 三部分，缺失键采用默认值；
        3) 时区偏移、起止日期等字符串字段在此解析，格式错误抛出 ValueError。

        Args:
            config_data: 原始配置字典

        Returns:
            AppConfig: 归一化后的应用配置对象
        """
        data = self._fold_legacy_keys(config_data)
        cfg = AppConfig()

        inp = data.get('input') or {}
        cfg.parser.input_path = str(inp.get('path') or "")
        cfg.parser.culture = inp.get('culture') or None
        cfg.parser.timezone_offset = parse_utc_offset(inp.get('timezone'))
        cfg.parser.skip_system = bool(inp.get('skip_system', False))
        cfg.parser.from_date = parse_day(inp.get('from_date'))
        cfg.parser.to_date = parse_day(inp.get('to_date'))

        out = data.get('output') or {}
        cfg.output.path = str(out.get('path') or "")
        cfg.output.sheet_mode = SheetMode.parse(out.get('sheet_mode', 'day'))
        cfg.output.force_rtl = bool(out.get('force_rtl', False))
        cfg.output.media_directory = out.get('media_directory') or None
        cfg.output.move_unused_media = bool(out.get('move_unused_media', False))
        cfg.output.unused_media_dirname = str(out.get('unused_media_dirname') or "unused")

        log = data.get('logging') or {}
        cfg.logging.level = str(log.get('level', cfg.logging.level))
        if 'file' in log:
            cfg.logging.file = str(log.get('file') or "")
        cfg.logging.max_size = str(log.get('max_size', cfg.logging.max_size))
        return cfg

    def save_config(self, config: AppConfig, file_path: Optional[str] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Path to save file. If None, uses current config_path
        """
        save_path = file_path or self.config_path or "config.yaml"

        os.makedirs(os.path.dirname(save_path) if os.path.dirname(save_path) else ".", exist_ok=True)

        config_dict = config.to_dict()

        file_ext = os.path.splitext(save_path)[1].lower()

        with open(save_path, 'w', encoding='utf-8') as f:
            if file_ext in ['.yaml', '.yml']:
                yaml.safe_dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            elif file_ext == '.json':
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
            else:
                raise ValueError(f"Unsupported configuration file format: {file_ext}")

    def get_config(self) -> AppConfig:
        """
        Get current configuration, loading if necessary.
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """
        Reload configuration from file.
        """
        self._config = None
        return self.load_config()
