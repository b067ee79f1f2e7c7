from __future__ import annotations

import codecs
import logging
import os
import queue
import select
import sys
import threading
import time
from typing import Callable

from rssterm.events import is_coalescable

logger = logging.getLogger(__name__)

# 15ms keeps scrolling smooth (~66 updates/s) without letting a fast scroll
# wheel flood the render loop.
DEFAULT_DEBOUNCE_SECONDS = 0.015

END_OF_STREAM = None
_NOTHING = object()

ESCAPE_SEQUENCES = {
    "[A": "UP",
    "[B": "DOWN",
    "OA": "UP",
    "OB": "DOWN",
    "[5~": "PGUP",
    "[6~": "PGDN",
    "[H": "HOME",
    "[1~": "HOME",
    "[F": "END",
    "[4~": "END",
}

CONTROL_KEYS = {
    "\r": "ENTER",
    "\n": "ENTER",
    "\x03": "CTRL_C",
    "\x04": "CTRL_D",
}


class DebouncedInputStream:
    """Leading + trailing debounce over a queue of key names.

    Coalescable keys are emitted immediately when the stream is open, after
    which the stream stays suppressed for ``delay`` seconds. Keys arriving while
    suppressed replace each other in a single pending slot; when the window
    closes the pending key is emitted and a new window starts. Every other key
    passes straight through.
    """

    def __init__(
        self,
        source: queue.Queue[str | None],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        coalescable: Callable[[str], bool] = is_coalescable,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay = delay
        self.closed = False
        self._source = source
        self._coalescable = coalescable
        self._clock = clock
        self._pending: object = _NOTHING
        self._can_emit = True
        self._deadline: float | None = None

    @property
    def is_suppressed(self) -> bool:
        return not self._can_emit

    @property
    def has_pending(self) -> bool:
        return self._pending is not _NOTHING

    def _take_pending(self) -> str:
        event = self._pending
        self._pending = _NOTHING
        return event  # type: ignore[return-value]

    def _suppress(self, now: float) -> None:
        self._can_emit = False
        self._deadline = now + self.delay

    def _expire_timer(self, now: float, ready: list[str]) -> None:
        if self._deadline is None or now < self._deadline:
            return
        self._deadline = None
        self._can_emit = True
        if self.has_pending:
            ready.append(self._take_pending())
            self._suppress(now)

    def poll(self) -> list[str]:
        now = self._clock()
        ready: list[str] = []
        self._expire_timer(now, ready)

        while not self.closed:
            try:
                event = self._source.get_nowait()
            except queue.Empty:
                break

            if event is END_OF_STREAM:
                if self.has_pending:
                    ready.append(self._take_pending())
                self.closed = True
                self._deadline = None
                break

            if not self._coalescable(event):
                ready.append(event)
            elif self._can_emit:
                ready.append(event)
                self._suppress(now)
            else:
                self._pending = event
        return ready


def _read_escape_sequence(fd: int) -> str:
    sequence = ""
    while select.select([fd], [], [], 0.001)[0]:
        chunk = os.read(fd, 1).decode("utf-8", errors="ignore")
        if not chunk:
            break
        sequence += chunk
        if len(sequence) >= 2 and (sequence[-1].isalpha() or sequence.endswith("~")):
            break
        if len(sequence) >= 6:
            break
    return ESCAPE_SEQUENCES.get(sequence, "ESC")


def decode_key(key: str) -> str:
    return CONTROL_KEYS.get(key, key)


def _line_reader_worker(event_queue: queue.Queue[str | None], stop_event: threading.Event) -> None:
    while not stop_event.is_set():
        line = sys.stdin.readline()
        if line == "":
            event_queue.put(END_OF_STREAM)
            return
        for key in line.rstrip("\n"):
            event_queue.put(decode_key(key))


def key_reader_worker(event_queue: queue.Queue[str | None], stop_event: threading.Event) -> None:
    if not sys.stdin.isatty():
        _line_reader_worker(event_queue, stop_event)
        return

    _raw_key_reader(sys.stdin.fileno(), event_queue, stop_event)


def _raw_key_reader(fd: int, event_queue: queue.Queue[str | None], stop_event: threading.Event) -> None:
    # Keys arrive one byte at a time; multi-byte characters are held until complete.
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while not stop_event.is_set():
        ready, _, _ = select.select([fd], [], [], 0.2)
        if not ready:
            continue
        data = os.read(fd, 1)
        if not data:
            event_queue.put(END_OF_STREAM)
            return
        key = decoder.decode(data)
        if not key:
            continue
        if key == "\x1b":
            event_queue.put(_read_escape_sequence(fd))
            continue
        event_queue.put(decode_key(key))
