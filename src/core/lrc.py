# core/lrc.py
from __future__ import annotations

import logging
import re
from bisect import bisect_right
from typing import Iterable, Sequence, Tuple

from core.models import LyricLine

logger = logging.getLogger(__name__)

# leading [mm:ss.xx] (centiseconds) or [mm:ss.xxx] (milliseconds)
_TS_RE = re.compile(r"^\[(\d{2,}):(\d{2})\.(\d{2,3})\]")


def _ts_to_ms(mm: str, ss: str, frac: str) -> int:
    ms = int(frac) * 10 if len(frac) == 2 else int(frac)
    return (int(mm) * 60 + int(ss)) * 1000 + ms


def _ms_to_ts(ms: int) -> str:
    """Format milliseconds as mm:ss.xx, or mm:ss.xxx when centiseconds would lose precision."""
    if ms < 0:
        ms = 0
    total_s = ms // 1000
    m = total_s // 60
    s = total_s % 60
    rest = ms % 1000
    if rest % 10 == 0:
        return f"{m:02d}:{s:02d}.{rest // 10:02d}"
    return f"{m:02d}:{s:02d}.{rest:03d}"


def parse_lrc(lrc_text: str) -> Tuple[LyricLine, ...]:
    """
    Returns lyric lines sorted by time.

    Only lines starting with a timestamp tag are kept; tagless lines,
    metadata tags ([ar:], [ti:], ...) and lines with no text left after the
    tag are skipped one by one, never failing the whole parse.
    """
    out: list[LyricLine] = []
    if not lrc_text:
        return ()

    for lineno, raw_line in enumerate(lrc_text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        m = _TS_RE.match(line)
        if not m:
            logger.debug("Skipping untagged lyric line %d: %r", lineno, line)
            continue

        text = line[m.end():].strip()
        if not text:
            continue

        ms = _ts_to_ms(m.group(1), m.group(2), m.group(3))
        out.append(LyricLine(time=ms / 1000, text=text))

    out.sort(key=lambda x: x.time)
    return tuple(out)


def serialize_lrc(lines: Iterable[LyricLine]) -> str:
    """Inverse of parse_lrc for well-formed lines (stripped, non-empty text)."""
    return "\n".join(
        f"[{_ms_to_ts(int(round(line.time * 1000)))}] {line.text}" for line in lines
    )


def resolve_active_index(lines: Sequence[LyricLine], current_time: float, offset: float = 0.0) -> int:
    """
    Greatest index whose time <= current_time + offset, -1 before the first
    line. The last line stays active after the final cue.
    """
    if not lines:
        return -1
    return bisect_right(lines, current_time + offset, key=lambda line: line.time) - 1

