"""
Locale-aware normalization of raw transcript lines before header matching.
"""
import re


# Arabic-Indic (U+0660..0669) and Extended Arabic-Indic (U+06F0..06F9) digits -> ASCII
_DIGIT_TABLE = {cp: ord("0") + (cp - 0x0660) for cp in range(0x0660, 0x066A)}
_DIGIT_TABLE.update({cp: ord("0") + (cp - 0x06F0) for cp in range(0x06F0, 0x06FA)})

# NBSP, narrow NBSP, figure space, word joiner
_SPACE_CHARS = ("\u00a0", "\u202f", "\u2007", "\u2060")

_TRANSLATION = dict(_DIGIT_TABLE)
_TRANSLATION.update({ord(ch): " " for ch in _SPACE_CHARS})

_SPACE_BEFORE_AMPM = re.compile(r"\s+(?=[AaPp]\.?[Mm]\.?)")


def normalize_digits_and_spaces(text: str) -> str:
    """Map locale digits and special spaces to ASCII and tidy the AM/PM gap.

    函数级注释：
    - 阿拉伯-印度数字与扩展阿拉伯-印度数字映射为 ASCII 0-9；
    - 不换行空格、窄不换行空格等统一替换为普通空格；
    - AM/PM 标记前的连续空白折叠为单个空格。
    """
    if not text:
        return text or ""
    return _SPACE_BEFORE_AMPM.sub(" ", text.translate(_TRANSLATION))
