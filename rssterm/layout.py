from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from rssterm.events import SCROLL_BOTTOM, SCROLL_TOP
from rssterm.models import Entry
from rssterm.textutil import human_age, wrap_lines

HIGHLIGHT_SYMBOL = ">> "
SCROLLBAR_WIDTH = 2
COLUMN_SPACING = 2
DATE_COLUMN_PERCENT = 20
UNTITLED = "untitled"


@dataclass(frozen=True)
class Row:
    title_lines: tuple[str, ...]
    untitled: bool
    url_line: str | None
    date_lines: tuple[str, ...]
    height: int
    margin: int

    @property
    def content_lines(self) -> tuple[str, ...]:
        if self.url_line is None:
            return self.title_lines
        return self.title_lines + (self.url_line,)


@dataclass
class RowLayout:
    rows: list[Row] = field(default_factory=list)
    cumulative_heights: list[int] = field(default_factory=list)
    content_width: int = 0
    date_width: int = 0

    @property
    def total_height(self) -> int:
        if not self.cumulative_heights:
            return 0
        return self.cumulative_heights[-1]

    def __len__(self) -> int:
        return len(self.rows)


def column_widths(total_width: int) -> tuple[int, int]:
    table_width = max(0, total_width - SCROLLBAR_WIDTH - len(HIGHLIGHT_SYMBOL))
    date_width = max(1, table_width * DATE_COLUMN_PERCENT // 100)
    content_width = max(1, table_width - date_width - COLUMN_SPACING)
    return content_width, date_width


def layout_row(
    entry: Entry,
    content_width: int,
    date_width: int,
    is_last: bool,
    now: datetime | None = None,
) -> Row:
    untitled = entry.title is None
    title_lines = wrap_lines(UNTITLED if untitled else entry.title, content_width)
    date_lines = wrap_lines(human_age(entry.published_at, now), date_width)
    content_count = len(title_lines) + (1 if entry.url else 0)
    return Row(
        title_lines=title_lines,
        untitled=untitled,
        url_line=entry.url or None,
        date_lines=date_lines,
        height=max(content_count, len(date_lines)),
        margin=0 if is_last else 1,
    )


def layout_rows(
    entries: Sequence[Entry],
    content_width: int,
    date_width: int,
    now: datetime | None = None,
) -> RowLayout:
    layout = RowLayout(content_width=content_width, date_width=date_width)
    total = 0
    last_index = len(entries) - 1
    for index, entry in enumerate(entries):
        row = layout_row(entry, content_width, date_width, index == last_index, now)
        total += row.height + row.margin
        layout.rows.append(row)
        layout.cumulative_heights.append(total)
    return layout


def scrollbar_thumb(position: int, content_length: int, track_length: int) -> tuple[int, int]:
    if content_length <= 0 or track_length <= 0:
        return 0, 0
    span = content_length + track_length
    thumb_length = max(1, min(track_length, round(track_length * track_length / span)))
    start = round(position * track_length / span)
    start = max(0, min(start, track_length - thumb_length))
    return start, thumb_length


class ViewportLayoutEngine:
    def __init__(self) -> None:
        self.selected: int | None = None
        self.offset = 0
        self.scrollbar_position = 0
        self.layout = RowLayout()

    @property
    def row_count(self) -> int:
        return len(self.layout)

    def relayout(
        self,
        entries: Sequence[Entry],
        total_width: int,
        now: datetime | None = None,
    ) -> RowLayout:
        content_width, date_width = column_widths(total_width)
        self.layout = layout_rows(entries, content_width, date_width, now)
        if self.selected is not None:
            self.selected = self._clamp(self.selected)
            self.scrollbar_position = self.scrollbar_position_for(self.selected)
        return self.layout

    def _clamp(self, index: int) -> int | None:
        if self.row_count == 0:
            return None
        return max(0, min(index, self.row_count - 1))

    def scrollbar_position_for(self, index: int | None) -> int:
        # Zero whenever the first row is selected, however tall that row is.
        if not index or not self.layout.cumulative_heights:
            return 0
        bounded = min(index, len(self.layout.cumulative_heights)) - 1
        return self.layout.cumulative_heights[bounded]

    def scroll(self, delta: int) -> None:
        if self.row_count == 0:
            self.selected = None
            self.scrollbar_position = 0
            return
        if delta == SCROLL_TOP:
            target = 0
        elif delta == SCROLL_BOTTOM:
            target = self.row_count - 1
        else:
            target = (self.selected or 0) + delta
        self.selected = self._clamp(target)
        self.scrollbar_position = self.scrollbar_position_for(self.selected)

    def sync_selection(self, entries: Sequence[Entry], expanded_id: int | None) -> None:
        if expanded_id is not None:
            for index, entry in enumerate(entries):
                if entry.id == expanded_id:
                    self.selected = index
                    break
        elif self.selected is None and entries:
            self.selected = 0
        if self.selected is not None and not entries:
            self.selected = None
        elif self.selected is not None:
            self.selected = min(self.selected, len(entries) - 1)
        self.scrollbar_position = self.scrollbar_position_for(self.selected)

    def visible_window(self, viewport_height: int) -> range:
        rows = self.layout.rows
        if not rows or viewport_height <= 0:
            return range(0)

        selected = self.selected or 0
        offset = min(self.offset, selected, len(rows) - 1)

        # Move the window down until the selected row fits below the offset.
        used = sum(row.height + row.margin for row in rows[offset:selected]) + rows[selected].height
        while used > viewport_height and offset < selected:
            used -= rows[offset].height + rows[offset].margin
            offset += 1

        end = offset
        used = 0
        while end < len(rows):
            needed = rows[end].height
            if used + needed > viewport_height and end > offset:
                break
            used += needed + rows[end].margin
            end += 1
        self.offset = offset
        return range(offset, end)
