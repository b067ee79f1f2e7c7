from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable

import feedparser
import requests

from rssterm import USER_AGENT
from rssterm.identity import identify
from rssterm.models import Entry
from rssterm.store import EntryStore
from rssterm.textutil import html_to_lines, parse_date

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_WORKERS = 8


class FetchError(Exception):
    pass


class FeedDecodeError(FetchError):
    pass


class LoadingCounter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._remaining = 0

    def start(self, count: int) -> None:
        with self._lock:
            self._remaining = max(0, count)

    def settle(self) -> None:
        with self._lock:
            if self._remaining > 0:
                self._remaining -= 1

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def is_loading(self) -> bool:
        return self.remaining > 0


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def pick_link(item: Any) -> str | None:
    links = item.get("links") or []
    for link in links:
        if link.get("rel") == "alternate" and link.get("href"):
            return link["href"]
    for link in links:
        if link.get("href"):
            return link["href"]
    return _clean(item.get("link"))


def pick_authors(item: Any) -> tuple[str, ...]:
    # Multi-author metadata (dc:creator, atom:author) wins over the single author field.
    authors = [
        name
        for name in (_clean(author.get("name")) for author in item.get("authors") or [])
        if name
    ]
    if not authors:
        single = _clean(item.get("author"))
        if single:
            authors.append(single)
    return tuple(authors)


def _content_value(item: Any) -> str | None:
    for content in item.get("content") or []:
        value = content.get("value")
        if value:
            return value
    return None


def _own_summary(item: Any) -> str | None:
    # feedparser copies the content into summary when the item has none of its own;
    # only a real description or summary element records summary_detail.
    if item.get("summary_detail") is None:
        return None
    return item.get("summary")


def _lines_or_none(raw: str | None) -> tuple[str, ...] | None:
    if raw is None:
        return None
    return html_to_lines(raw)


def entry_from_rss_item(item: Any, source_url: str = "") -> Entry | None:
    published_at = parse_date(item.get("published_parsed")) or parse_date(item.get("published"))
    if published_at is None:
        return None

    title = item.get("title")
    description = _own_summary(item)
    return Entry(
        id=identify(title, description, published_at),
        title=title,
        url=pick_link(item),
        authors=pick_authors(item),
        body=_lines_or_none(_content_value(item)),
        summary=_lines_or_none(description),
        published_at=published_at,
        source_url=source_url,
    )


def entry_from_atom_entry(item: Any, source_url: str = "") -> Entry | None:
    published_at = (
        parse_date(item.get("updated_parsed"))
        or parse_date(item.get("updated"))
        or parse_date(item.get("published_parsed"))
        or parse_date(item.get("published"))
    )
    if published_at is None:
        return None

    title = item.get("title")
    return Entry(
        id=identify(title, item.get("id"), published_at),
        title=title,
        url=pick_link(item),
        authors=pick_authors(item),
        body=_lines_or_none(_content_value(item)),
        summary=_lines_or_none(_own_summary(item)),
        published_at=published_at,
        source_url=source_url,
    )


def _collect(
    raw_entries: Iterable[Any],
    build: Callable[[Any, str], Entry | None],
    source_url: str,
) -> list[Entry]:
    entries: list[Entry] = []
    dropped = 0
    for raw in raw_entries:
        entry = build(raw, source_url)
        if entry is None:
            dropped += 1
            continue
        entries.append(entry)
    if dropped:
        logger.debug("Dropped %d entries without a usable date from %s", dropped, source_url)
    return entries


def decode_rss(parsed: Any, source_url: str = "") -> list[Entry]:
    version = parsed.get("version") or ""
    if not version.startswith("rss"):
        raise FeedDecodeError(f"not an RSS document (version={version or 'unknown'})")
    return _collect(parsed.get("entries") or [], entry_from_rss_item, source_url)


def decode_atom(parsed: Any, source_url: str = "") -> list[Entry]:
    version = parsed.get("version") or ""
    if not version.startswith("atom"):
        raise FeedDecodeError(f"not an Atom document (version={version or 'unknown'})")
    return _collect(parsed.get("entries") or [], entry_from_atom_entry, source_url)


FEED_DECODERS: tuple[Callable[[Any, str], list[Entry]], ...] = (decode_rss, decode_atom)


def decode_feed(payload: bytes | str, source_url: str = "") -> list[Entry]:
    parsed = feedparser.parse(payload)
    for decoder in FEED_DECODERS:
        try:
            return decoder(parsed, source_url)
        except FeedDecodeError:
            continue
    raise FeedDecodeError("Failed to parse feed")


def fetch_source(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[Entry]:
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(str(exc)) from exc
    return decode_feed(response.content, source_url=url)


class FeedFetcher:
    def __init__(
        self,
        store: EntryStore,
        counter: LoadingCounter | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        fetch: Callable[[str, float], list[Entry]] = fetch_source,
    ) -> None:
        self.store = store
        self.counter = counter or LoadingCounter()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.no_sources = False
        self._fetch = fetch
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def is_loading(self) -> bool:
        return self.counter.is_loading

    def run(self, source_urls: list[str]) -> None:
        if not source_urls:
            self.no_sources = True
            logger.info("No feed sources configured")
            return

        urls = list(source_urls)
        self.counter.start(len(urls))
        self._thread = threading.Thread(
            target=self._fetch_all,
            args=(urls,),
            name="rssterm-fetcher",
            daemon=True,
        )
        self._thread.start()

    def _fetch_all(self, urls: list[str]) -> None:
        logger.info("Fetching %d feeds", len(urls))
        self._executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(urls)),
            thread_name_prefix="rssterm-fetch",
        )
        try:
            futures: dict[Future[list[Entry]], str] = {
                self._executor.submit(self._fetch, url, self.timeout): url for url in urls
            }
            for future in as_completed(futures):
                if self._stop_event.is_set():
                    break
                url = futures[future]
                try:
                    entries = future.result()
                except FetchError as exc:
                    logger.warning("Feed fetch error for %s: %s", url, exc)
                except Exception as exc:
                    logger.warning("Feed task failed for %s: %s", url, exc)
                else:
                    self.store.merge(entries)
                    logger.info("Fetched %d entries from %s", len(entries), url)
                finally:
                    self.counter.settle()
        finally:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self.join(timeout)
