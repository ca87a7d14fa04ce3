# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class SortMethod(str, Enum):
    NAME = "NAME"
    DATE = "DATE"   # best-effort: needs modified_time, which basic scans don't fill
    TYPE = "TYPE"


class FollowState(Enum):
    AUTO_FOLLOWING = "auto_following"
    USER_OVERRIDDEN = "user_overridden"


@dataclass(frozen=True)
class HierarchicalNode:
    name: str
    kind: NodeKind
    path: str                           # identity key for selection sets
    size: int | None = None
    modified_time: float | None = None  # epoch seconds

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


@dataclass(frozen=True)
class ScanOptions:
    show_hidden: bool = False
    sort_method: SortMethod = SortMethod.NAME


@dataclass(frozen=True)
class LyricLine:
    time: float     # seconds
    text: str


@dataclass
class SyncCursor:
    active_index: int = -1      # -1 = before first line
    offset_seconds: float = 0.0


@dataclass(frozen=True)
class PerformanceSample:
    fps: int
    is_degraded: bool


@dataclass(frozen=True)
class Track:
    file_path: str
    file_name: str
    title: str
    artist: str
    album: str
    duration: float
    lrc_lyrics: str | None = None
    txt_lyrics: str | None = None


@dataclass
class PlayQueue:
    id: str
    name: str
    tracks: list[Track] = field(default_factory=list)
