from __future__ import annotations

import threading
from typing import Iterable

from rssterm.models import Entry


class EntryStore:
    """Entries from every completed source, newest first.

    Writers hold the lock for append and sort only; readers copy the list into
    a tuple and release it before doing any layout work.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[Entry] = []
        self._snapshot: tuple[Entry, ...] = ()

    def merge(self, new_entries: Iterable[Entry]) -> None:
        incoming = list(new_entries)
        with self._lock:
            self._entries.extend(incoming)
            self._entries.sort(key=lambda entry: entry.published_at, reverse=True)
            self._snapshot = tuple(self._entries)

    def snapshot(self) -> tuple[Entry, ...]:
        with self._lock:
            return self._snapshot

    def find(self, entry_id: int) -> Entry | None:
        for entry in self.snapshot():
            if entry.id == entry_id:
                return entry
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
