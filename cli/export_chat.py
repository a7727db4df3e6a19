import argparse
import logging
import sys
from datetime import date

import yaml

from controllers.main_controller import MainController
from models.config import AppConfig, parse_utc_offset
from models.data_models import SheetMode
from services.config_manager import ConfigManager
from services.logging_manager import LoggingManager
from ui.progress import ProgressReporter


USAGE_EXAMPLE = (
    "whatsapp2excel <input_chat.txt> <output.xlsx> [--media-dir=...] [--skip-system] [--culture=ar-SA] "
    "[--timezone=+03:00] [--rtl] [--from=YYYY-MM-DD] [--to=YYYY-MM-DD] [--sheet=day|all]"
)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert an exported WhatsApp chat (.txt) into an Excel workbook",
        epilog=f"Example: {USAGE_EXAMPLE}",
    )
    parser.add_argument("input", nargs="?", help="exported chat .txt file (default: from settings file)")
    parser.add_argument("output", nargs="?", help="output .xlsx file (default: from settings file)")
    parser.add_argument("--config", help="settings file (yaml/json); default: config.yaml, settings.json, ...")
    parser.add_argument("--media-dir", help="directory holding the exported media files")
    parser.add_argument("--skip-system", action="store_true", help="leave out system notices")
    parser.add_argument("--culture", help="culture for fallback date parsing, e.g. ar-SA or en-US")
    parser.add_argument("--timezone", help="fixed UTC offset of the transcript times, e.g. +03:00")
    parser.add_argument("--rtl", action="store_true", help="force right-to-left sheets")
    parser.add_argument("--from", dest="from_date", help="first day to include (YYYY-MM-DD)")
    parser.add_argument("--to", dest="to_date", help="last day to include (YYYY-MM-DD)")
    parser.add_argument("--sheet", choices=["day", "all"], help="one sheet per day (default) or all in one")
    parser.add_argument("--move-unused-media", action="store_true", help="move media files no message links to into an 'unused' folder")
    parser.add_argument("--log-level", help="override logging level (DEBUG, INFO, ...)")
    parser.add_argument("--no-progress", action="store_true", help="disable progress reporter")
    return parser


def _parse_day_arg(value, flag: str):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logging.getLogger(__name__).warning(f"Invalid {flag} date (expected YYYY-MM-DD): {value}")
        return None


def _apply_cli_overrides(cfg: AppConfig, args) -> AppConfig:
    """Apply command-line values on top of the loaded settings.

    Invalid --timezone/--from/--to values are reported and ignored.
    """
    log = logging.getLogger(__name__)
    if args.input:
        cfg.parser.input_path = args.input
    if args.output:
        cfg.output.path = args.output
    if args.media_dir:
        cfg.output.media_directory = args.media_dir.strip('"')
    if args.skip_system:
        cfg.parser.skip_system = True
    if args.culture:
        cfg.parser.culture = args.culture
    if args.timezone:
        try:
            cfg.parser.timezone_offset = parse_utc_offset(args.timezone)
        except ValueError:
            log.warning(f"Invalid --timezone value: {args.timezone}")
    if args.rtl:
        cfg.output.force_rtl = True
    from_date = _parse_day_arg(args.from_date, "--from")
    if from_date:
        cfg.parser.from_date = from_date
    to_date = _parse_day_arg(args.to_date, "--to")
    if to_date:
        cfg.parser.to_date = to_date
    if args.sheet:
        cfg.output.sheet_mode = SheetMode.parse(args.sheet)
    if args.move_unused_media:
        cfg.output.move_unused_media = True
    return cfg


def main():
    """
    导出 CLI 入口。

    函数级注释：
    - 位置参数 input/output 缺省时从配置文件（config.yaml、settings.json 等）读取；
    - 命令行选项覆盖配置文件中的同名设置；
    - 仍缺少输入或输出路径时打印用法并以退出码 1 结束；
    - 输入文件不存在或配置非法时记录错误并以退出码 1 结束。
    """
    parser = build_arg_parser()
    args = parser.parse_args()

    cfg_mgr = ConfigManager(args.config)
    try:
        app_cfg = cfg_mgr.get_config()
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"Failed to load settings: {e}", file=sys.stderr)
        sys.exit(1)

    LoggingManager().setup(app_cfg, level_override=args.log_level)
    log = logging.getLogger(__name__)

    app_cfg = _apply_cli_overrides(app_cfg, args)
    if not app_cfg.parser.input_path or not app_cfg.output.path:
        log.error("No input/output given and no settings file provides them.")
        print(f"Usage:\n  {USAGE_EXAMPLE}")
        sys.exit(1)

    try:
        app_cfg.validate()
    except ValueError as e:
        log.error(str(e))
        sys.exit(1)

    reporter = None if args.no_progress else ProgressReporter(logging.getLogger("progress"))
    controller = MainController(app_cfg, reporter=reporter)
    try:
        summary = controller.run()
    except FileNotFoundError as e:
        log.error(str(e))
        sys.exit(1)

    log.info(f"Excel written: {summary.output_path}")
    if app_cfg.parser.from_date or app_cfg.parser.to_date:
        start = app_cfg.parser.from_date.isoformat() if app_cfg.parser.from_date else "min"
        end = app_cfg.parser.to_date.isoformat() if app_cfg.parser.to_date else "max"
        log.info(f"Filtered days: {start} -> {end}")
    log.info(f"Sheet mode: {app_cfg.output.sheet_mode.value}")
    log.info(f"Messages written: {summary.messages_written}, sheets: {summary.groups}, media links: {summary.media_linked}")
    return summary


if __name__ == "__main__":
    main()
