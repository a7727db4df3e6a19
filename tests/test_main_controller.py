from datetime import date, datetime

import pytest
from openpyxl import load_workbook

from controllers.main_controller import MainController
from models.config import AppConfig
from models.data_models import SheetMode


def _write_chat(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _config(tmp_path, chat_path, **output):
    cfg = AppConfig()
    cfg.parser.input_path = str(chat_path)
    cfg.output.path = str(tmp_path / "chat.xlsx")
    for k, v in output.items():
        setattr(cfg.output, k, v)
    return cfg


def test_run_day_sheets(tmp_path, sample_chat_lines):
    chat = _write_chat(tmp_path / "chat.txt", sample_chat_lines)
    summary = MainController(_config(tmp_path, chat)).run()

    assert summary.messages_written == 4
    assert summary.groups == 2
    wb = load_workbook(summary.output_path)
    assert wb.sheetnames == ["2025-07-19", "2025-07-20"]
    assert wb["2025-07-19"]["C2"].value == "Hello there\nhow are you?"
    assert wb["2025-07-20"]["A3"].value == datetime(2025, 7, 20, 22, 1)


def test_run_all_sheet_with_filters(tmp_path, sample_chat_lines):
    chat = _write_chat(tmp_path / "chat.txt", sample_chat_lines)
    cfg = _config(tmp_path, chat, sheet_mode=SheetMode.ALL)
    cfg.parser.skip_system = True
    cfg.parser.from_date = date(2025, 7, 20)

    summary = MainController(cfg).run()

    ws = load_workbook(summary.output_path)["All"]
    assert summary.messages_written == 2
    assert [ws.cell(row=r, column=2).value for r in (2, 3)] == ["Alice", "Bob"]


def test_run_links_and_moves_media(tmp_path, sample_chat_lines):
    media = tmp_path / "media"
    media.mkdir()
    (media / "IMG-20250720-WA0001.jpg").write_bytes(b"img")
    (media / "orphan.jpg").write_bytes(b"img")
    chat = _write_chat(tmp_path / "chat.txt", sample_chat_lines)
    cfg = _config(tmp_path, chat, media_directory=str(media), move_unused_media=True)

    summary = MainController(cfg).run()

    assert summary.media_linked == 1
    assert summary.media_moved == 1
    assert (media / "IMG-20250720-WA0001.jpg").exists()
    assert (media / "unused" / "orphan.jpg").exists()
    ws = load_workbook(summary.output_path)["2025-07-20"]
    assert ws["D2"].value == "IMG-20250720-WA0001.jpg"
    assert ws["D2"].hyperlink is not None


def test_run_missing_input(tmp_path):
    cfg = _config(tmp_path, tmp_path / "missing.txt")
    with pytest.raises(FileNotFoundError):
        MainController(cfg).run()


def test_run_without_output_path(tmp_path, sample_chat_lines):
    chat = _write_chat(tmp_path / "chat.txt", sample_chat_lines)
    cfg = _config(tmp_path, chat)
    cfg.output.path = ""
    with pytest.raises(ValueError):
        MainController(cfg).run()


def test_run_empty_transcript(tmp_path):
    chat = _write_chat(tmp_path / "chat.txt", ["no header here"])
    summary = MainController(_config(tmp_path, chat)).run()
    assert summary.messages_written == 0
    assert load_workbook(summary.output_path).sheetnames == ["All"]


def test_move_unused_media_in_export_folder_keeps_chat_and_workbook(tmp_path, sample_chat_lines):
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    (export_dir / "IMG-20250720-WA0001.jpg").write_bytes(b"img")
    (export_dir / "orphan.jpg").write_bytes(b"img")
    chat = _write_chat(export_dir / "chat.txt", sample_chat_lines)
    cfg = _config(tmp_path, chat, media_directory=str(export_dir), move_unused_media=True)
    cfg.output.path = str(export_dir / "chat.xlsx")

    summary = MainController(cfg).run()

    assert summary.media_moved == 1
    assert chat.exists()
    assert summary.output_path.exists()
    assert [p.name for p in (export_dir / "unused").iterdir()] == ["orphan.jpg"]


def test_filtered_out_media_is_not_moved(tmp_path, sample_chat_lines):
    media = tmp_path / "media"
    media.mkdir()
    (media / "IMG-20250720-WA0001.jpg").write_bytes(b"img")
    (media / "orphan.jpg").write_bytes(b"img")
    chat = _write_chat(tmp_path / "chat.txt", sample_chat_lines)
    cfg = _config(tmp_path, chat, media_directory=str(media), move_unused_media=True)
    cfg.parser.to_date = date(2025, 7, 19)

    summary = MainController(cfg).run()

    assert summary.messages_written == 2
    assert summary.media_linked == 0
    assert summary.media_moved == 1
    assert (media / "IMG-20250720-WA0001.jpg").exists()
    assert (media / "unused" / "orphan.jpg").exists()
