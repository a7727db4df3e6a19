"""
Locating media files referenced by chat messages, and tidying the media folder.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Optional

from services.message_classifier import MEDIA_EXTENSIONS


logger = logging.getLogger(__name__)


def _creation_time(path: Path) -> float:
    st = path.stat()
    # st_birthtime 仅部分平台提供，否则退回 st_ctime
    return getattr(st, "st_birthtime", st.st_ctime)


def resolve_media_link(media_dir, token: str) -> Optional[str]:
    """Find the file a media token refers to.

    函数级注释：
    - 先检查 media_dir/token 是否存在（精确匹配）；
    - 否则递归搜索文件名包含 token 主干、且扩展名相同（忽略大小写）的文件，
      取创建时间最新者；同一时间按目录遍历顺序取第一个；
    - 目录不存在、无权限等 I/O 异常只记录日志，返回 None，不会中断导出。

    Args:
        media_dir: directory holding the exported media
        token: filename token detected in the message, e.g. "IMG-2024-WA0001.jpg"

    Returns:
        Absolute path as string, or None when not found
    """
    if not media_dir or not token:
        return None
    root = Path(media_dir)
    exact = root / token
    try:
        if exact.is_file():
            return str(exact.resolve())
    except OSError as e:
        logger.debug(f"Cannot stat {exact}: {e}")

    stem = Path(token).stem
    ext = Path(token).suffix.lower()
    try:
        candidates = [
            p for p in root.rglob("*")
            if p.is_file() and stem in p.name and p.name.lower().endswith(ext)
        ]
        if not candidates:
            return None
        best = max(candidates, key=_creation_time)
        return str(best.resolve())
    except OSError as e:
        logger.debug(f"Media search failed in {root} for '{token}': {e}")
        return None


def move_unused_media(
    media_dir,
    used_paths: Iterable[str],
    target_dirname: str = "unused",
    keep_paths: Iterable[str] = (),
) -> int:
    """Move top-level media files that no message references into a sub-folder.

    函数级注释：
    - 只处理扩展名属于 MEDIA_EXTENSIONS 的顶层文件；
    - keep_paths（例如聊天记录本身和刚写出的工作簿）永远不会被移动，
      即使其扩展名（txt/xlsx）也在媒体扩展名列表中。

    Returns:
        Number of files moved
    """
    root = Path(media_dir)
    if not root.is_dir():
        logger.warning(f"Media directory not found, nothing to move: {root}")
        return 0

    used = set()
    for p in list(used_paths) + list(keep_paths):
        if p:
            used.add(os.path.normcase(str(Path(p).resolve())))

    extensions = {f".{ext}" for ext in MEDIA_EXTENSIONS}
    target = root / target_dirname
    moved = 0
    for entry in sorted(root.iterdir()):
        if not entry.is_file() or entry.suffix.lower() not in extensions:
            continue
        if os.path.normcase(str(entry.resolve())) in used:
            continue
        try:
            target.mkdir(exist_ok=True)
            shutil.move(str(entry), str(target / entry.name))
            moved += 1
        except OSError as e:
            logger.warning(f"Failed to move unused media {entry.name}: {e}")
    if moved:
        logger.info(f"Moved {moved} unused media file(s) to {target}")
    return moved
