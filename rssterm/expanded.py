from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rssterm.events import SCROLL_BOTTOM, SCROLL_TOP
from rssterm.layout import SCROLLBAR_WIDTH, UNTITLED
from rssterm.models import Entry
from rssterm.render import CONTENT_STYLE, render_scrollbar
from rssterm.textutil import LONG_TIMESTAMP_FMT, human_age, wrap_lines

PANEL_PADDING = (1, 2)
META_HEIGHT = 2


class ExpandedEntryViewer:
    """Detail view for a single entry.

    Wrapped content is cached per (entry id, width); a height change only
    re-clamps the scroll offset.
    """

    def __init__(self) -> None:
        self.entry_id: int | None = None
        self.cached_lines: tuple[str, ...] | None = None
        self.render_width: int | None = None
        self.render_height: int | None = None
        self.scroll_offset = 0
        self._cache_key: tuple[int, int] | None = None

    @property
    def is_open(self) -> bool:
        return self.entry_id is not None

    def open(self, entry_id: int) -> None:
        self.entry_id = entry_id

    def close(self) -> None:
        self.entry_id = None
        self.cached_lines = None
        self.render_width = None
        self.render_height = None
        self.scroll_offset = 0
        self._cache_key = None

    def max_scroll_offset(self) -> int:
        total = len(self.cached_lines or ())
        return max(0, total - (self.render_height or 0))

    def scroll(self, delta: int) -> None:
        if delta == SCROLL_TOP:
            self.scroll_offset = 0
        elif delta == SCROLL_BOTTOM:
            self.scroll_offset = self.max_scroll_offset()
        elif delta < 0:
            self.scroll_offset = max(0, self.scroll_offset + delta)
        else:
            self.scroll_offset = min(self.scroll_offset + delta, self.max_scroll_offset())

    def sync(self, entry: Entry, width: int, height: int) -> tuple[str, ...]:
        key = (entry.id, width)
        if self._cache_key != key:
            lines: list[str] = []
            for line in entry.content_lines or ():
                lines.extend(wrap_lines(line, width))
            self.cached_lines = tuple(lines)
            self._cache_key = key

        self.entry_id = entry.id
        self.render_width = width
        self.render_height = height
        self.scroll_offset = min(self.scroll_offset, self.max_scroll_offset())
        return self.cached_lines or ()

    def visible_lines(self) -> tuple[str, ...]:
        lines = self.cached_lines or ()
        height = self.render_height or 0
        return lines[self.scroll_offset : self.scroll_offset + height]

    def render(self, entry: Entry, width: int, height: int) -> RenderableType:
        pad_y, pad_x = PANEL_PADDING
        inner_width = max(1, width - 2 - pad_x * 2)
        inner_height = max(1, height - 2 - pad_y * 2)

        if entry.title is None:
            title = Text(UNTITLED, style="dim bold")
        else:
            title = Text("\n".join(wrap_lines(entry.title, inner_width)), style="bold white")
        title_height = len(title.plain.splitlines()) or 1

        header_height = title_height + 1 + META_HEIGHT
        content_height = max(0, inner_height - header_height - 2)
        text_width = max(1, inner_width - SCROLLBAR_WIDTH)

        self.sync(entry, text_width, content_height)
        visible = list(self.visible_lines())
        visible.extend([""] * (content_height - len(visible)))

        body = Table.grid(expand=False)
        body.add_column(width=text_width, no_wrap=True, overflow="crop")
        body.add_column(width=SCROLLBAR_WIDTH, no_wrap=True)
        body.add_row(
            Text("\n".join(visible), style=CONTENT_STYLE),
            render_scrollbar(self.scroll_offset, self.max_scroll_offset(), content_height),
        )

        return Panel(
            Group(title, Text(""), render_meta(entry, inner_width), Text(""), body),
            box=box.ROUNDED,
            border_style="bright_black",
            padding=PANEL_PADDING,
            height=height,
        )


def render_meta(entry: Entry, width: int) -> RenderableType:
    date_label = Text()
    date_label.append(human_age(entry.published_at), style="yellow italic")
    date_label.append("\n")
    date_label.append(entry.published_at.strftime(LONG_TIMESTAMP_FMT), style="dim")

    if not entry.authors:
        return date_label

    authors = Text("by ", style="dim")
    for index, author in enumerate(entry.authors):
        if index > 0:
            authors.append(", ", style="dim")
        authors.append(author, style="bright_green italic")

    meta = Table.grid(expand=True)
    meta.add_column(ratio=1)
    meta.add_column(ratio=1, justify="right")
    date_label.justify = "right"
    meta.add_row(authors, date_label)
    return meta
