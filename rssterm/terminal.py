from __future__ import annotations

import logging
import sys
import termios
import threading
import tty
from types import TracebackType
from typing import Any

logger = logging.getLogger(__name__)


class TerminalSession:
    """Puts stdin in cbreak mode and guarantees it is put back.

    The saved attributes are restored on exit and also from the process and
    thread exception hooks, so a crash anywhere still leaves a usable shell.
    Failing to enter cbreak mode is fatal and propagates.
    """

    def __init__(self, stream: Any = None) -> None:
        self.stream = stream or sys.stdin
        self._fd: int | None = None
        self._saved: list[Any] | None = None
        self._previous_excepthook = None
        self._previous_thread_excepthook = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def __enter__(self) -> TerminalSession:
        if not self.stream.isatty():
            return self
        fd = self.stream.fileno()
        saved = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
        except (termios.error, OSError):
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            raise
        self._fd = fd
        self._saved = saved
        self._install_hooks()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._remove_hooks()
        self.restore()

    def restore(self) -> None:
        if self._fd is None or self._saved is None:
            return
        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
        self._saved = None
        self._fd = None

    def _restore_quietly(self) -> None:
        try:
            self.restore()
        except (termios.error, OSError) as exc:
            logger.error("Failed to restore terminal: %s", exc)

    def _install_hooks(self) -> None:
        self._previous_excepthook = sys.excepthook
        self._previous_thread_excepthook = threading.excepthook
        previous = self._previous_excepthook
        previous_thread = self._previous_thread_excepthook

        def excepthook(exc_type, exc, traceback):
            self._restore_quietly()
            previous(exc_type, exc, traceback)

        def thread_excepthook(args):
            self._restore_quietly()
            previous_thread(args)

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook

    def _remove_hooks(self) -> None:
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
            self._previous_excepthook = None
        if self._previous_thread_excepthook is not None:
            threading.excepthook = self._previous_thread_excepthook
            self._previous_thread_excepthook = None
