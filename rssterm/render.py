from __future__ import annotations

import time
from typing import Callable

from rich.text import Text

from rssterm.layout import SCROLLBAR_WIDTH, scrollbar_thumb

CONTENT_STYLE = "rgb(232,233,240)"
HELP_STYLE = "rgb(100,116,139)"
THUMB_SYMBOL = "▐"
SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


def render_scrollbar(position: int, content_length: int, track_length: int) -> Text:
    start, thumb_length = scrollbar_thumb(position, content_length, track_length)
    text = Text(no_wrap=True)
    for line in range(max(0, track_length)):
        if line:
            text.append("\n")
        if start <= line < start + thumb_length:
            text.append(THUMB_SYMBOL.rjust(SCROLLBAR_WIDTH), style="bright_black")
        else:
            text.append(" " * SCROLLBAR_WIDTH)
    return text


class Spinner:
    def __init__(self, interval: float = 0.25, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval
        self._clock = clock
        self._frame = 0
        self._last = clock()

    def render(self) -> Text:
        now = self._clock()
        if now - self._last >= self.interval:
            self._frame = (self._frame + 1) % len(SPINNER_FRAMES)
            self._last = now
        return Text(SPINNER_FRAMES[self._frame], style="cyan")


class FpsMeter:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._frames = 0
        self._last = clock()
        self.current: float | None = None
        self.previous: float | None = None

    def tick(self) -> None:
        self._frames += 1
        elapsed = self._clock() - self._last
        if elapsed > 1.0 and self._frames > 2:
            self.previous = self.current
            self.current = self._frames / elapsed
            self._frames = 0
            self._last = self._clock()

    def render(self) -> Text:
        self.tick()
        text = Text(justify="right")
        if self.current is None:
            return text
        text.append(f"{self.current:.2f} fps", style="green")
        if self.previous is not None:
            if self.previous == 0:
                change = 100.0
            else:
                change = abs((self.current - self.previous) / self.previous * 100.0)
            symbol = "▲" if self.previous < self.current else "▼"
            label = f" {symbol} {change:.2f}% "
            text.append(" ")
            # Under 2% counts as no change.
            if change < 2.0:
                text.append(label, style="white")
            elif self.previous < self.current:
                text.append(label, style="white on rgb(22,163,74)")
            else:
                text.append(label, style="white on rgb(220,38,38)")
        return text
