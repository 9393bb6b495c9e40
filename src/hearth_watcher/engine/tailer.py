"""Incremental tailing of a log file written by another process.

The tailer polls the file's size. Each observed change is a growth
event; bursts of events are collapsed by a trailing-edge debounce so
that one read covers them all. Only the unread byte range is read. A
file that got smaller was rewritten from scratch and is re-read from
offset 0.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

from hearth_watcher.core.logging import get_logger


logger = get_logger(__name__)

LinesCallback = Callable[[list[str]], None]


def chunked(lines: Sequence[str], size: int | None) -> Iterator[list[str]]:
    """Split lines into groups of ``size`` (one group when size is None)."""
    if not size:
        yield list(lines)
        return
    for start in range(0, len(lines), size):
        yield list(lines[start : start + size])


class TrailingDebouncer:
    """Run a callback once a burst of triggers has been quiet for ``delay``.

    Each trigger carries a value; the callback receives the latest one.
    At most one callback runs at a time. After ``cancel`` no pending or
    future trigger fires.
    """

    def __init__(self, delay: float, callback: Callable[[int], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._lock = threading.Lock()
        self._run_lock = threading.RLock()
        self._timer: threading.Timer | None = None
        self._pending: int | None = None
        self._cancelled = False

    @property
    def pending(self) -> int | None:
        return self._pending

    def trigger(self, value: int) -> None:
        """Record a value and restart the quiet-period timer."""
        with self._lock:
            if self._cancelled:
                return
            self._pending = value
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Run the pending callback now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._fire()

    def cancel(self) -> None:
        """Drop any pending trigger and wait for a running callback to end."""
        with self._lock:
            self._cancelled = True
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        with self._run_lock:
            pass

    def _fire(self) -> None:
        with self._lock:
            if self._cancelled or self._pending is None:
                return
            value, self._pending = self._pending, None
            self._timer = None

        with self._run_lock:
            if self._cancelled:
                return
            try:
                self._callback(value)
            except Exception:
                logger.exception("Debounced callback failed", value=value)


class IncrementalTailer:
    """Tail a file, delivering only lines written since the last read.

    Attributes:
        path: File being tailed.
        last_read_offset: Byte offset up to which the file has been consumed.

    Example:
        >>> tailer = IncrementalTailer(Path("Player.log"), on_lines=print)
        >>> tailer.start()
        >>> tailer.stop()
    """

    def __init__(
        self,
        path: Path,
        on_lines: LinesCallback,
        *,
        debounce_seconds: float = 0.1,
        poll_interval: float = 0.25,
        lines_per_update: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the tailer.

        Args:
            path: File to tail.
            on_lines: Receives each chunk of new lines, in file order.
            debounce_seconds: Quiet period collapsing growth bursts.
            poll_interval: Period between size checks.
            lines_per_update: Maximum lines per ``on_lines`` call.
            encoding: Text encoding of the file.
        """
        self.path = Path(path)
        self.on_lines = on_lines
        self.debounce_seconds = debounce_seconds
        self.poll_interval = poll_interval
        self.lines_per_update = lines_per_update
        self.encoding = encoding

        self.last_read_offset = 0
        self._fragment = b""
        self._observed: tuple[int, int] | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._debouncer = TrailingDebouncer(debounce_seconds, self.handle_growth)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling in a background thread."""
        if self.running:
            return
        self._stop_event = threading.Event()
        self._debouncer = TrailingDebouncer(self.debounce_seconds, self.handle_growth)
        self._thread = threading.Thread(
            target=self._poll_loop,
            name=f"tailer:{self.path.name}",
            daemon=True,
        )
        self._thread.start()
        logger.info("Tailer started", path=str(self.path))

    def stop(self) -> None:
        """Stop polling, drop any pending read and reset the offset."""
        self._stop_event.set()
        self._debouncer.cancel()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=max(1.0, self.poll_interval * 4))
        self._thread = None
        self.last_read_offset = 0
        self._fragment = b""
        self._observed = None
        logger.info("Tailer stopped", path=str(self.path))

    def poll_once(self) -> bool:
        """Check the file once, raising a growth event if it changed.

        Returns:
            True if a growth event was raised.
        """
        try:
            stat = os.stat(self.path)
        except FileNotFoundError:
            return False

        signature = (stat.st_size, stat.st_mtime_ns)
        if signature == self._observed:
            return False
        self._observed = signature
        self._debouncer.trigger(stat.st_size)
        return True

    def flush(self) -> None:
        """Process a pending growth event immediately."""
        self._debouncer.flush()

    def read_range(self, new_size: int) -> list[str]:
        """Read the bytes between the last offset and ``new_size``.

        A trailing line without its newline is kept back and completed
        by the next read.

        Returns:
            Complete lines, without line terminators.
        """
        start = self.last_read_offset
        if new_size < start:
            logger.info("Log file truncated, reading from start", path=str(self.path), size=new_size)
            start = 0
            self._fragment = b""

        with open(self.path, "rb") as handle:
            handle.seek(start)
            data = self._fragment + handle.read(max(0, new_size - start))

        cut = max(data.rfind(b"\n"), data.rfind(b"\r")) + 1
        self._fragment = data[cut:]
        return data[:cut].decode(self.encoding, errors="replace").splitlines()

    def handle_growth(self, new_size: int) -> None:
        """Consume everything written up to ``new_size`` and deliver it."""
        try:
            lines = self.read_range(new_size)
        except OSError as exc:
            logger.warning("Cannot read log file", path=str(self.path), error=str(exc))
            return
        self.last_read_offset = new_size

        if not lines:
            return
        logger.debug("Read new lines", count=len(lines), offset=new_size)
        for chunk in chunked(lines, self.lines_per_update):
            self.on_lines(chunk)

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except OSError as exc:
                logger.warning("Cannot stat log file", path=str(self.path), error=str(exc))
            self._stop_event.wait(self.poll_interval)


__all__ = ["chunked", "TrailingDebouncer", "IncrementalTailer"]
