from __future__ import annotations

import logging
import subprocess
import sys
import webbrowser
from typing import Callable

from rich.console import RenderableType
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from rssterm import APP_NAME
from rssterm.events import CLOSE, COLLAPSE, EXPAND, OPEN, SCROLL, AppEvent
from rssterm.expanded import ExpandedEntryViewer
from rssterm.fetcher import FeedFetcher
from rssterm.layout import COLUMN_SPACING, HIGHLIGHT_SYMBOL, SCROLLBAR_WIDTH, ViewportLayoutEngine
from rssterm.models import Entry
from rssterm.render import CONTENT_STYLE, render_scrollbar
from rssterm.store import EntryStore

logger = logging.getLogger(__name__)

EXAMPLE_FEED_URL = "https://hnrss.org/frontpage"


def open_link(url: str) -> str:
    clean_url = url.strip()
    if not clean_url:
        return "No URL available for selected entry."
    try:
        if sys.platform == "darwin":
            subprocess.Popen(["open", clean_url], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        elif not webbrowser.open(clean_url, new=2):
            return f"No handler available to open {clean_url}"
        return ""
    except (OSError, webbrowser.Error) as exc:
        return f"Failed to open URL: {exc}"


class FeedWidget:
    """Feed table with a Collapsed (row navigation) and Expanded (detail) state."""

    def __init__(
        self,
        store: EntryStore,
        fetcher: FeedFetcher,
        opener: Callable[[str], str] = open_link,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.viewport = ViewportLayoutEngine()
        self.expanded = ExpandedEntryViewer()
        self.exit_requested = False
        self._opener = opener

    @property
    def is_loading(self) -> bool:
        return self.fetcher.is_loading

    @property
    def show_help(self) -> bool:
        return self.fetcher.no_sources

    def run(self, source_urls: list[str]) -> None:
        self.fetcher.run(source_urls)

    def selected_entry(self) -> Entry | None:
        entries = self.store.snapshot()
        index = self.viewport.selected
        if index is None or index >= len(entries):
            return None
        return entries[index]

    def handle_event(self, event: AppEvent) -> None:
        if event.kind == SCROLL:
            if self.expanded.is_open:
                self.expanded.scroll(event.delta)
            else:
                self.viewport.scroll(event.delta)
        elif event.kind == EXPAND:
            if self.expanded.is_open:
                return
            entry = self.selected_entry()
            if entry is not None:
                self.expanded.open(entry.id)
        elif event.kind == COLLAPSE:
            if self.expanded.is_open:
                self.expanded.close()
        elif event.kind == CLOSE:
            if self.expanded.is_open:
                self.expanded.close()
            else:
                # Events only reach the widget while it has focus, so there is
                # nothing left to close and the app should quit.
                self.exit_requested = True
        elif event.kind == OPEN:
            self.open_selected()

    def open_selected(self) -> None:
        entry = self.selected_entry()
        if entry is None or not entry.url:
            logger.warning("No entry selected or no URL available")
            return
        error = self._opener(entry.url)
        if error:
            logger.warning(error)
        else:
            logger.info("Opened %s", entry.url)

    def render(self, width: int, height: int) -> RenderableType:
        if self.show_help:
            return render_help(height)

        entries = self.store.snapshot()
        if self.expanded.is_open:
            self.viewport.sync_selection(entries, self.expanded.entry_id)
            entry = self.store.find(self.expanded.entry_id)
            if entry is not None:
                return self.expanded.render(entry, width, height)

        layout = self.viewport.relayout(entries, width)
        self.viewport.sync_selection(entries, self.expanded.entry_id)
        window = self.viewport.visible_window(height)

        rows = Table.grid(padding=0)
        rows.add_column(width=len(HIGHLIGHT_SYMBOL), no_wrap=True)
        rows.add_column(width=layout.content_width, no_wrap=True, overflow="crop")
        rows.add_column(width=COLUMN_SPACING, no_wrap=True)
        rows.add_column(width=layout.date_width, no_wrap=True, overflow="crop", justify="right")

        if not entries:
            message = "Waiting for feeds..." if self.is_loading else "No entries available."
            rows.add_row("", Text(message, style="dim"), "", "")

        last_visible = window[-1] if window else None
        for index in window:
            row = layout.rows[index]
            marker = Text(HIGHLIGHT_SYMBOL, style="magenta") if index == self.viewport.selected else ""
            content = Text(no_wrap=True)
            content.append("\n".join(row.title_lines), style="dim bold" if row.untitled else "bold white")
            if row.url_line is not None:
                content.append("\n")
                content.append(row.url_line, style="dim")
            date = Text("\n".join(row.date_lines), style="yellow italic", justify="right")
            rows.add_row(marker, content, "", date)
            if row.margin and index != last_visible:
                rows.add_row("", "", "", "")

        frame = Table.grid(padding=0)
        frame.add_column(width=max(1, width - SCROLLBAR_WIDTH), no_wrap=True)
        frame.add_column(width=SCROLLBAR_WIDTH, no_wrap=True)
        frame.add_row(
            rows,
            render_scrollbar(self.viewport.scrollbar_position, layout.total_height, height),
        )
        return frame


def render_help(height: int) -> RenderableType:
    text = Text(justify="center")
    text.append("NO FEEDS FOUND", style="bold")
    text.append("\n\n")
    text.append("Add RSS/Atom URLs to the feeds file to get started", style=CONTENT_STYLE)
    text.append("\n\n")
    text.append("$ ", style="dim")
    text.append(f"echo '{EXAMPLE_FEED_URL}' >> $({APP_NAME} feeds)", style="green")
    return Padding(text, (height // 3, 0, 0, 0))
