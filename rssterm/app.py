from __future__ import annotations

import queue
import sys
import threading
import time

from dotenv import load_dotenv
from rich.console import Console, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from rssterm import APP_NAME, __version__
from rssterm.config import AppConfig, parse_args, read_source_list
from rssterm.diagnostics import DiagnosticsHandler, configure_logging
from rssterm.events import EXIT, HELP_KEYS, parse_key
from rssterm.fetcher import FeedFetcher
from rssterm.render import HELP_STYLE, FpsMeter, Spinner
from rssterm.store import EntryStore
from rssterm.stream import DebouncedInputStream, key_reader_worker
from rssterm.terminal import TerminalSession
from rssterm.textutil import LONG_TIMESTAMP_FMT, now_local, truncate
from rssterm.widget import FeedWidget

MARGIN = 1
HEADER_HEIGHT = 2
STATUS_HEIGHT = 1
FOOTER_HEIGHT = 1


def render_help_bar() -> Text:
    text = Text(style=HELP_STYLE, no_wrap=True, overflow="ellipsis")
    for index, (key, description) in enumerate(HELP_KEYS):
        if index > 0:
            text.append(" | ")
        text.append(key, style="bold")
        text.append(f" {description}")
    return text


def render_status_line(diagnostics: DiagnosticsHandler | None, width: int) -> Text:
    latest = diagnostics.latest() if diagnostics is not None else None
    if not latest:
        return Text("")
    return Text(truncate(latest, max(1, width)), style="red", no_wrap=True)


class App:
    def __init__(
        self,
        config: AppConfig,
        console: Console,
        diagnostics: DiagnosticsHandler | None = None,
        widget: FeedWidget | None = None,
    ) -> None:
        self.config = config
        self.console = console
        self.diagnostics = diagnostics
        if widget is None:
            store = EntryStore()
            fetcher = FeedFetcher(
                store,
                timeout=config.request_timeout,
                max_workers=config.max_workers,
            )
            widget = FeedWidget(store, fetcher)
        self.feed = widget
        self.should_quit = False
        self.spinner = Spinner()
        self.fps = FpsMeter() if config.show_fps else None

    def handle_key(self, key: str) -> None:
        event = parse_key(key)
        if event is None:
            return
        if event.kind == EXIT:
            self.should_quit = True
            return
        # FeedWidget is the only focused widget, so every other event goes to it.
        self.feed.handle_event(event)
        if self.feed.exit_requested:
            self.should_quit = True

    def render_header(self) -> RenderableType:
        left = Text(no_wrap=True)
        left.append(APP_NAME, style="bold magenta")
        left.append(" ")
        left.append(f"v{__version__}", style="blue")
        if self.feed.is_loading:
            left.append(" ")
            left.append_text(self.spinner.render())

        clock = Text(now_local().strftime(LONG_TIMESTAMP_FMT), style="cyan", justify="right")
        header = Table.grid(expand=True)
        header.add_column(ratio=1)
        header.add_column(ratio=1, justify="right")
        header.add_row(left, clock)
        return header

    def draw(self) -> RenderableType:
        width = max(1, self.console.size.width - MARGIN * 2)
        fps_height = 1 if self.fps is not None else 0
        reserved = MARGIN * 2 + HEADER_HEIGHT + STATUS_HEIGHT + FOOTER_HEIGHT + fps_height
        main_height = max(1, self.console.size.height - reserved)

        def padded(renderable: RenderableType) -> Padding:
            return Padding(renderable, (0, MARGIN))

        sections = [
            Layout(Text(""), name="top", size=MARGIN),
            Layout(padded(self.render_header()), name="header", size=HEADER_HEIGHT),
            Layout(padded(self.feed.render(width, main_height)), name="main", size=main_height),
            Layout(
                padded(render_status_line(self.diagnostics, width)),
                name="status",
                size=STATUS_HEIGHT,
            ),
            Layout(padded(render_help_bar()), name="footer", size=FOOTER_HEIGHT),
        ]
        if self.fps is not None:
            sections.append(Layout(padded(self.fps.render()), name="fps", size=fps_height))
        sections.append(Layout(Text(""), name="bottom", size=MARGIN))

        root = Layout(name="root")
        root.split_column(*sections)
        return root

    def run(self) -> int:
        source_urls = read_source_list(self.config.feeds_file)
        self.feed.run(source_urls)

        key_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()
        reader = threading.Thread(
            target=key_reader_worker,
            args=(key_queue, stop_event),
            name="rssterm-keys",
            daemon=True,
        )
        reader.start()
        events = DebouncedInputStream(key_queue)
        tick_seconds = self.config.tick_seconds

        with Live(
            self.draw(),
            console=self.console,
            auto_refresh=False,
            screen=True,
            vertical_overflow="crop",
        ) as live:
            try:
                while not self.should_quit:
                    started = time.monotonic()
                    for key in events.poll():
                        self.handle_key(key)
                        if self.should_quit:
                            break
                    if events.closed:
                        self.should_quit = True
                    if self.should_quit:
                        break
                    live.update(self.draw(), refresh=True)
                    remaining = tick_seconds - (time.monotonic() - started)
                    if remaining > 0:
                        time.sleep(remaining)
            finally:
                stop_event.set()
                self.feed.fetcher.stop()
                reader.join(timeout=0.5)
        return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    console = Console()
    try:
        config = parse_args(argv if argv is not None else sys.argv[1:])
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return 2

    if config.command == "feeds":
        console.print(str(config.feeds_file), markup=False, highlight=False, soft_wrap=True)
        return 0

    diagnostics = configure_logging(config.log_level, config.log_file)
    try:
        with TerminalSession():
            return App(config, console, diagnostics).run()
    except KeyboardInterrupt:
        console.print("\n[bold]Stopped.[/bold]")
        return 0
