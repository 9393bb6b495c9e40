"""Engine: following the log file and publishing state changes.

Exports:
    IncrementalTailer: Reads only the unread tail of the log file.
    TrailingDebouncer: Collapses bursts of growth events.
    ChangeNotifier: Subscriber registry.
    WatcherEvent: Published event kinds.
    MatchRecorder: Per-match output log writer.
    LogWatcher: Facade wiring everything together.
"""

from __future__ import annotations

from hearth_watcher.engine.notifier import ChangeNotifier, Subscriber, WatcherEvent
from hearth_watcher.engine.recorder import MatchRecorder, sanitize_filename
from hearth_watcher.engine.tailer import IncrementalTailer, TrailingDebouncer, chunked
from hearth_watcher.engine.watcher import LogWatcher


__all__ = [
    "ChangeNotifier",
    "Subscriber",
    "WatcherEvent",
    "MatchRecorder",
    "sanitize_filename",
    "IncrementalTailer",
    "TrailingDebouncer",
    "chunked",
    "LogWatcher",
]
