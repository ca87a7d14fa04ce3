# src/library/enumerator.py
"""
Single-level directory enumeration that never blocks the UI thread for long.

Two source kinds, two capability levels:
  - LocalHandle: walked on the UI thread in time slices (CooperativeScan).
    Only name/kind/path are filled in.
  - RemotePath: handed off to a worker thread (delegated_scan), which also
    stats every entry, so size and modified_time are available.

Both produce the same ordering: directories first, then files, sorted by the
requested method with ties broken by name.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Generator, Iterator, List, Optional, Tuple, Union

from core.media_filter import is_playable
from core.models import HierarchicalNode, NodeKind, ScanOptions, SortMethod
from core.utils import file_extension, name_sort_key

logger = logging.getLogger(__name__)

YIELD_THRESHOLD_S = 0.016   # one frame at 60 Hz
HIDDEN_PREFIX = "."


class ScanAccessError(Exception):
    """The directory became unreadable while it was being scanned."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"Cannot read directory {path}{reason}")


@dataclass(frozen=True)
class LocalHandle:
    path: str

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.path)) or self.path

    def entries(self) -> Iterator[Tuple[str, bool]]:
        """(name, is_directory) in the order the OS returns them."""
        with os.scandir(self.path) as it:
            for entry in it:
                yield entry.name, entry.is_dir()


@dataclass(frozen=True)
class RemotePath:
    path: str

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.path)) or self.path


ScanSource = Union[LocalHandle, RemotePath]


# -------------------------------
# FILTER / SORT
# -------------------------------
def accepts_entry(name: str, is_dir: bool, options: ScanOptions) -> bool:
    if not options.show_hidden and name.startswith(HIDDEN_PREFIX):
        return False
    if not is_dir and not is_playable(name):
        return False
    return True


def _sort_key(node: HierarchicalNode, method: SortMethod):
    kind_rank = 0 if node.is_directory else 1
    name_key = name_sort_key(node.name)
    if method is SortMethod.TYPE:
        # folders have no type; "photos.jpg/" still sorts by name
        ext = "" if node.is_directory else file_extension(node.name)
        return kind_rank, ext, name_key
    if method is SortMethod.DATE:
        # newest first; entries without a timestamp go last, by name
        has_time = node.modified_time is not None
        return kind_rank, not has_time, -(node.modified_time or 0.0), name_key
    return kind_rank, name_key


def sort_nodes(nodes: List[HierarchicalNode], method: SortMethod = SortMethod.NAME) -> List[HierarchicalNode]:
    method = SortMethod(method)
    return sorted(nodes, key=lambda n: _sort_key(n, method))


def _child_path(path_prefix: str, name: str) -> str:
    return os.path.join(path_prefix, name) if path_prefix else name


# -------------------------------
# COOPERATIVE (UI THREAD) SCAN
# -------------------------------
class CooperativeScan:
    """
    Resumable scan of one LocalHandle level.

    Each resume() runs until the time budget is spent, then returns False so
    the caller can hand control back to its event loop; the next resume()
    continues from the same entry. Returns True once the scan has finished
    (or was cancelled). A failing source raises ScanAccessError from resume().
    """

    def __init__(
        self,
        handle: LocalHandle,
        path_prefix: Optional[str] = None,
        options: ScanOptions = ScanOptions(),
        budget_s: float = YIELD_THRESHOLD_S,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if not isinstance(handle, LocalHandle):
            raise TypeError(f"CooperativeScan needs a LocalHandle, got {type(handle).__name__}")
        self.handle = handle
        self.path_prefix = handle.path if path_prefix is None else path_prefix
        self.options = options
        self.budget_s = budget_s
        self._clock = clock

        self._alive = True
        self._done = False
        self._result: Optional[List[HierarchicalNode]] = None
        self.slices = 0
        self._steps = self._run()

    @property
    def done(self) -> bool:
        return self._done

    @property
    def cancelled(self) -> bool:
        return not self._alive

    @property
    def result(self) -> List[HierarchicalNode]:
        if not self._done or self._result is None:
            raise RuntimeError("Scan has not finished")
        return self._result

    def cancel(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self._done = True
        self._steps.close()  # releases the directory iterator
        logger.debug("Scan of %s cancelled after %d slices", self.handle.path, self.slices)

    def resume(self) -> bool:
        if self._done:
            return True
        self.slices += 1
        try:
            next(self._steps)
        except StopIteration as stop:
            self._result = stop.value
            self._done = True
        except ScanAccessError:
            self._done = True
            raise
        return self._done

    def run_to_completion(self) -> List[HierarchicalNode]:
        while not self.resume():
            pass
        return self.result

    def _run(self) -> Generator[None, None, List[HierarchicalNode]]:
        nodes: List[HierarchicalNode] = []
        last_yield = self._clock()
        try:
            for name, is_dir in self.handle.entries():
                if self._clock() - last_yield > self.budget_s:
                    yield
                    last_yield = self._clock()

                if not accepts_entry(name, is_dir, self.options):
                    continue

                nodes.append(HierarchicalNode(
                    name=name,
                    kind=NodeKind.DIRECTORY if is_dir else NodeKind.FILE,
                    path=_child_path(self.path_prefix, name),
                ))
        except OSError as e:
            logger.warning("Scan of %s failed: %s", self.handle.path, e)
            raise ScanAccessError(self.handle.path, e) from e

        return sort_nodes(nodes, self.options.sort_method)


# -------------------------------
# DELEGATED (WORKER THREAD) SCAN
# -------------------------------
def delegated_scan(
    source: RemotePath,
    path_prefix: Optional[str] = None,
    options: ScanOptions = ScanOptions(),
    is_alive: Callable[[], bool] = lambda: True,
) -> List[HierarchicalNode]:
    """Blocking scan with size and modified_time. Meant for a worker thread."""
    prefix = source.path if path_prefix is None else path_prefix
    nodes: List[HierarchicalNode] = []
    try:
        with os.scandir(source.path) as it:
            for entry in it:
                if not is_alive():
                    return []
                is_dir = entry.is_dir()
                if not accepts_entry(entry.name, is_dir, options):
                    continue
                st = entry.stat()
                nodes.append(HierarchicalNode(
                    name=entry.name,
                    kind=NodeKind.DIRECTORY if is_dir else NodeKind.FILE,
                    path=_child_path(prefix, entry.name),
                    size=None if is_dir else int(st.st_size),
                    modified_time=float(st.st_mtime),
                ))
    except OSError as e:
        logger.warning("Delegated scan of %s failed: %s", source.path, e)
        raise ScanAccessError(source.path, e) from e

    return sort_nodes(nodes, options.sort_method)


def enumerate_directory(
    source: ScanSource,
    path_prefix: Optional[str] = None,
    options: ScanOptions = ScanOptions(),
) -> List[HierarchicalNode]:
    """Scan one level to completion, whatever the source kind."""
    if isinstance(source, LocalHandle):
        return CooperativeScan(source, path_prefix, options).run_to_completion()
    if isinstance(source, RemotePath):
        return delegated_scan(source, path_prefix, options)
    raise TypeError(f"Unsupported scan source: {type(source).__name__}")


# -------------------------------
# RECURSIVE MEDIA WALK (queue building)
# -------------------------------
def iter_media_paths(directories: list[str], max_depth: int = 3, show_hidden: bool = False) -> list[str]:
    """Playable files under the given roots, at most max_depth levels down."""
    paths: list[str] = []
    for root in directories:
        if not root or not os.path.isdir(root):
            continue
        root_depth = os.path.normpath(root).count(os.sep)
        for dirpath, dirnames, filenames in os.walk(root):
            depth = os.path.normpath(dirpath).count(os.sep) - root_depth
            if depth >= max_depth:
                dirnames[:] = []
            if not show_hidden:
                dirnames[:] = [d for d in dirnames if not d.startswith(HIDDEN_PREFIX)]
            dirnames.sort(key=name_sort_key)
            for fn in sorted(filenames, key=name_sort_key):
                if not show_hidden and fn.startswith(HIDDEN_PREFIX):
                    continue
                if is_playable(fn):
                    paths.append(os.path.join(dirpath, fn))
    return paths
