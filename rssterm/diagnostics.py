from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_DIAGNOSTICS = 12


class DiagnosticsHandler(logging.Handler):
    """Keeps the latest log messages for the status line.

    The alternate screen owns stdout/stderr while the reader runs, so
    diagnostics are shown in-app instead of printed.
    """

    def __init__(self, max_entries: int = MAX_DIAGNOSTICS, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self._lock_entries = threading.Lock()
        self._entries: deque[str] = deque(maxlen=max_entries)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except Exception:
            self.handleError(record)
            return
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        with self._lock_entries:
            self._entries.append(f"[{timestamp}] {message}")

    def latest(self) -> str | None:
        with self._lock_entries:
            return self._entries[-1] if self._entries else None

    def entries(self) -> list[str]:
        with self._lock_entries:
            return list(self._entries)


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> DiagnosticsHandler:
    root = logging.getLogger()
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")
    root.setLevel(min(numeric_level, logging.WARNING))
    # Library warnings would otherwise go to stderr under the alternate screen.
    logging.captureWarnings(True)

    for handler in list(root.handlers):
        if isinstance(handler, DiagnosticsHandler):
            root.removeHandler(handler)

    diagnostics = DiagnosticsHandler()
    root.addHandler(diagnostics)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    return diagnostics
