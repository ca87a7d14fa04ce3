# core/lyrics_sync.py
"""
Lyrics sync: maps the playback clock onto the active lyric line and decides
when the lyrics view should scroll to follow it.

The engine has no Qt dependency. The view feeds it clock ticks and user input
and receives two kinds of callbacks: the active line changed (for
highlighting) and a follow directive (where to scroll, and whether to ease).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from core.lrc import parse_lrc, resolve_active_index
from core.models import FollowState, LyricLine, SyncCursor

logger = logging.getLogger(__name__)

FOLLOW_ANCHOR = 0.35        # active line sits at 35% of the viewport height
OFFSET_STEP_SECONDS = 0.1
DEFAULT_LINE_EXTENT = 48.0

LineGeometry = Callable[[int], Tuple[float, float]]   # index -> (top, height)


@dataclass(frozen=True)
class FollowDirective:
    line_index: int
    target_offset: float
    smooth: bool
    generation: int


def compute_follow_offset(
    line_top: float,
    line_extent: float,
    viewport_extent: float,
    anchor: float = FOLLOW_ANCHOR,
    max_offset: Optional[float] = None,
) -> float:
    """Scroll offset that puts the middle of a line at `anchor` of the viewport, clamped."""
    target = line_top + line_extent / 2 - viewport_extent * anchor
    if max_offset is not None:
        target = min(target, max_offset)
    return max(0.0, target)


class LyricsSyncEngine:
    def __init__(
        self,
        line_geometry: Optional[LineGeometry] = None,
        viewport_extent: float = 600.0,
        anchor: float = FOLLOW_ANCHOR,
        offset_step: float = OFFSET_STEP_SECONDS,
    ):
        self._line_geometry = line_geometry or self._fixed_geometry
        self.viewport_extent = float(viewport_extent)
        self.max_offset: Optional[float] = None
        self.anchor = anchor
        self.offset_step = offset_step

        self._lines: Tuple[LyricLine, ...] = ()
        self._cursor = SyncCursor()
        self._follow_state = FollowState.AUTO_FOLLOWING
        self._current_time = 0.0
        self._clock_seq = -1
        self._generation = 0

        # reduced motion: follow directives jump instead of easing
        self.reduce_motion = False

        self.on_active_index_changed: Optional[Callable[[int], None]] = None
        self.on_follow: Optional[Callable[[FollowDirective], None]] = None
        self.on_follow_state_changed: Optional[Callable[[FollowState], None]] = None

    @staticmethod
    def _fixed_geometry(index: int) -> Tuple[float, float]:
        return index * DEFAULT_LINE_EXTENT, DEFAULT_LINE_EXTENT

    # --- state ---
    @property
    def lines(self) -> Tuple[LyricLine, ...]:
        return self._lines

    @property
    def active_index(self) -> int:
        return self._cursor.active_index

    @property
    def offset(self) -> float:
        return self._cursor.offset_seconds

    @property
    def follow_state(self) -> FollowState:
        return self._follow_state

    @property
    def generation(self) -> int:
        return self._generation

    def set_viewport(self, viewport_extent: float, max_offset: Optional[float] = None) -> None:
        self.viewport_extent = max(0.0, float(viewport_extent))
        self.max_offset = max_offset

    # --- source ---
    def load_track(self, raw_text: str) -> Tuple[LyricLine, ...]:
        """New track: parse its lyrics and start following from the top."""
        # the previous track's clock means nothing for this one
        self._current_time = 0.0
        self._clock_seq = -1
        return self._reset_source(raw_text)

    def reparse(self, raw_text: str) -> Tuple[LyricLine, ...]:
        """Edited-and-saved source: reset cursor and offset, keep the playback clock."""
        return self._reset_source(raw_text)

    def _reset_source(self, raw_text: str) -> Tuple[LyricLine, ...]:
        self.cancel_follow()
        self._lines = parse_lrc(raw_text or "")
        self._cursor = SyncCursor()
        self._set_follow_state(FollowState.AUTO_FOLLOWING)
        logger.debug("Loaded %d synced lyric lines", len(self._lines))
        self._apply_index(resolve_active_index(self._lines, self._current_time, 0.0))
        return self._lines

    # --- clock ---
    def update_clock(self, current_time: float, seq: Optional[int] = None) -> int:
        """
        Feed the playback position in seconds. When the producer numbers its
        ticks, a tick older than the latest applied one is dropped.
        """
        if seq is not None:
            if seq <= self._clock_seq:
                return self._cursor.active_index
            self._clock_seq = seq
        self._current_time = float(current_time)
        return self._recompute()

    def _recompute(self) -> int:
        idx = resolve_active_index(self._lines, self._current_time, self._cursor.offset_seconds)
        self._apply_index(idx)
        return idx

    def _apply_index(self, idx: int) -> None:
        if idx == self._cursor.active_index:
            return
        self._cursor.active_index = idx
        if self.on_active_index_changed:
            self.on_active_index_changed(idx)
        if self._follow_state is FollowState.AUTO_FOLLOWING:
            self._request_follow()

    # --- offset ---
    def adjust_offset(self, steps: int = 1) -> float:
        return self.set_offset(self._cursor.offset_seconds + steps * self.offset_step)

    def set_offset(self, seconds: float) -> float:
        # round away float drift from repeated 0.1 steps
        self._cursor.offset_seconds = round(float(seconds), 3)
        self._recompute()
        return self._cursor.offset_seconds

    # --- follow state machine ---
    def user_scrolled(self) -> None:
        """Wheel/touch-drag by the user: stop following immediately."""
        if self._follow_state is FollowState.AUTO_FOLLOWING:
            self.cancel_follow()
            self._set_follow_state(FollowState.USER_OVERRIDDEN)

    def resume_sync(self) -> None:
        self._set_follow_state(FollowState.AUTO_FOLLOWING)
        self._request_follow()

    def seek_to_line(self, index: int) -> Optional[float]:
        """Time to seek to for a clicked line; clicking also resumes following."""
        if not 0 <= index < len(self._lines):
            return None
        self.resume_sync()
        return self._lines[index].time

    def cancel_follow(self) -> None:
        """Invalidate every directive issued so far."""
        self._generation += 1

    def is_current(self, directive: FollowDirective) -> bool:
        return (
            directive.generation == self._generation
            and self._follow_state is FollowState.AUTO_FOLLOWING
        )

    def _set_follow_state(self, state: FollowState) -> None:
        if state is self._follow_state:
            return
        self._follow_state = state
        if self.on_follow_state_changed:
            self.on_follow_state_changed(state)

    def _request_follow(self) -> None:
        idx = self._cursor.active_index
        if idx < 0 or self._follow_state is not FollowState.AUTO_FOLLOWING:
            return
        # a newer directive supersedes any still in flight
        self._generation += 1
        top, extent = self._line_geometry(idx)
        directive = FollowDirective(
            line_index=idx,
            target_offset=compute_follow_offset(
                top, extent, self.viewport_extent, self.anchor, self.max_offset
            ),
            smooth=not self.reduce_motion,
            generation=self._generation,
        )
        if self.on_follow:
            self.on_follow(directive)
