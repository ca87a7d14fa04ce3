# ui/workers/directory_scanner.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QThread, QTimer, Signal

from core.models import ScanOptions
from library.enumerator import (
    CooperativeScan,
    LocalHandle,
    RemotePath,
    ScanAccessError,
    ScanSource,
    delegated_scan,
    iter_media_paths,
)
from library.track_metadata import read_track

logger = logging.getLogger(__name__)


class CooperativeScanDriver(QObject):
    """
    Runs a CooperativeScan on the UI thread, one time slice per event-loop
    turn, so painting and input keep flowing between slices.

    `finished` fires once the driver has stopped for good (done, failed or
    cancelled), mirroring QThread.finished for the delegated worker.
    """
    finished_signal = Signal(object, object)    # driver, list[HierarchicalNode]
    failed_signal = Signal(object, str)         # driver, message
    finished = Signal()

    def __init__(self, scan: CooperativeScan, parent=None):
        super().__init__(parent)
        self.scan = scan
        self._alive = False
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(0)
        self._timer.timeout.connect(self._step)

    def start(self):
        self._alive = True
        self._timer.start()

    def cancel(self):
        if not self._alive:
            return
        self.scan.cancel()
        self._stop()

    def is_running(self) -> bool:
        return self._alive

    def _step(self):
        if not self._alive:
            return
        try:
            done = self.scan.resume()
        except ScanAccessError as e:
            self.failed_signal.emit(self, str(e))
            self._stop()
            return

        if not done:
            self._timer.start()
            return

        if not self.scan.cancelled:
            self.finished_signal.emit(self, self.scan.result)
        self._stop()

    def _stop(self):
        if not self._alive:
            return
        self._alive = False
        self._timer.stop()
        self.finished.emit()


class DelegatedScanWorker(QThread):
    """Scans a RemotePath off the UI thread, with size/modified time filled in."""
    finished_signal = Signal(object, object)    # worker, list[HierarchicalNode]
    failed_signal = Signal(object, str)         # worker, message

    def __init__(self, source: RemotePath, path_prefix: str | None, options: ScanOptions, parent=None):
        super().__init__(parent)
        self.source = source
        self.path_prefix = path_prefix
        self.options = options

    def cancel(self):
        self.requestInterruption()

    def is_running(self) -> bool:
        return self.isRunning()

    def run(self):
        try:
            nodes = delegated_scan(
                self.source,
                self.path_prefix,
                self.options,
                is_alive=lambda: not self.isInterruptionRequested(),
            )
        except ScanAccessError as e:
            if not self.isInterruptionRequested():
                self.failed_signal.emit(self, str(e))
            return

        if not self.isInterruptionRequested():
            self.finished_signal.emit(self, nodes)


def create_directory_scan(source: ScanSource, path_prefix: str | None, options: ScanOptions, parent=None):
    """
    Pick the scanner for the source kind and return it unstarted, so callers
    can connect before calling .start(). The scanner deletes itself once its
    `finished` signal fires.
    """
    if isinstance(source, LocalHandle):
        runner = CooperativeScanDriver(CooperativeScan(source, path_prefix, options), parent)
    elif isinstance(source, RemotePath):
        runner = DelegatedScanWorker(source, path_prefix, options, parent)
    else:
        raise TypeError(f"Unsupported scan source: {type(source).__name__}")
    runner.finished.connect(runner.deleteLater)
    logger.debug("Scanning %s with %s", source.path, type(runner).__name__)
    return runner


class LibraryScanner(QThread):
    """
    Reads tags for playable files, off the UI thread, for the play queue.

    Either walks `directories` (up to `max_depth` levels) or reads an explicit
    list of `paths` in the given order.
    """
    progress_signal = Signal(int, int)     # scanned, total
    tracks_signal = Signal(object)         # list[Track], in batches
    finished_signal = Signal(bool, str)    # ok, message

    def __init__(
        self,
        directories: list[str] | None = None,
        max_depth: int = 3,
        show_hidden: bool = False,
        paths: list[str] | None = None,
    ):
        super().__init__()
        self.directories = directories or []
        self.max_depth = max_depth
        self.show_hidden = show_hidden
        self.paths = paths

    def run(self):
        if self.paths is not None:
            paths = list(self.paths)
        else:
            try:
                paths = iter_media_paths(self.directories, self.max_depth, self.show_hidden)
            except OSError as e:
                logger.warning("Library scan failed: %s", e)
                self.finished_signal.emit(False, f"Scan failed: {e}")
                return

        total = len(paths)
        scanned = 0
        batch = []
        for p in paths:
            if self.isInterruptionRequested():
                self.finished_signal.emit(False, "Scan cancelled")
                return

            batch.append(read_track(p))
            scanned += 1

            if len(batch) >= 100:
                self.tracks_signal.emit(list(batch))
                batch.clear()
                self.progress_signal.emit(scanned, total)

        if batch:
            self.tracks_signal.emit(batch)

        self.progress_signal.emit(scanned, total)
        self.finished_signal.emit(True, f"Queued {scanned} files.")
