from __future__ import annotations

from dataclasses import dataclass, replace

from core.models import ScanOptions, SortMethod
from core.performance import RecoveryPolicy


@dataclass(frozen=True)
class Config:
    show_hidden_files: bool = False
    sort_method: SortMethod = SortMethod.NAME
    default_dir: str = ""
    reduce_motion: bool = False
    sync_offset_step: float = 0.1       # seconds per +/- click
    list_overscan: int = 5
    recovery_policy: RecoveryPolicy = RecoveryPolicy.STAY_DEGRADED
    recursive_depth: int = 3

    def scan_options(self) -> ScanOptions:
        return ScanOptions(show_hidden=self.show_hidden_files, sort_method=self.sort_method)

    def with_changes(self, **changes) -> "Config":
        return replace(self, **changes)
