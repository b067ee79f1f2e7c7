from __future__ import annotations

import sys
from dataclasses import dataclass

SCROLL = "scroll"
EXPAND = "expand"
COLLAPSE = "collapse"
CLOSE = "close"
OPEN = "open"
EXIT = "exit"

# Scroll deltas with these magnitudes jump to the first and last position.
SCROLL_TOP = -sys.maxsize - 1
SCROLL_BOTTOM = sys.maxsize

PAGE_ROWS = 10

# Single-row scrolls. Mouse wheel ticks reach us as arrow keys.
COALESCABLE_KEYS = frozenset({"UP", "DOWN", "j", "k"})


@dataclass(frozen=True)
class AppEvent:
    kind: str
    delta: int = 0


def scroll(delta: int) -> AppEvent:
    return AppEvent(SCROLL, delta)


KEY_BINDINGS: dict[str, AppEvent] = {
    "UP": scroll(-1),
    "k": scroll(-1),
    "DOWN": scroll(1),
    "j": scroll(1),
    "PGUP": scroll(-PAGE_ROWS),
    "PGDN": scroll(PAGE_ROWS),
    "g": scroll(SCROLL_TOP),
    "HOME": scroll(SCROLL_TOP),
    "G": scroll(SCROLL_BOTTOM),
    "END": scroll(SCROLL_BOTTOM),
    "ENTER": AppEvent(EXPAND),
    "q": AppEvent(CLOSE),
    "ESC": AppEvent(CLOSE),
    "o": AppEvent(OPEN),
    "CTRL_D": AppEvent(EXIT),
    "CTRL_C": AppEvent(EXIT),
}

HELP_KEYS = (
    ("j/k/↑/↓", "scroll"),
    ("g/G", "top/btm"),
    ("Enter", "expand"),
    ("o", "open"),
    ("q", "close"),
    ("Ctrl+D", "exit"),
)


def parse_key(key: str) -> AppEvent | None:
    return KEY_BINDINGS.get(key)


def is_coalescable(key: str) -> bool:
    return key in COALESCABLE_KEYS
