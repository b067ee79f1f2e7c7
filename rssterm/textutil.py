from __future__ import annotations

import logging
import re
import warnings
from datetime import datetime, timezone
from functools import lru_cache
from time import struct_time
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from dateutil import parser as date_parser
from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)

LONG_TIMESTAMP_FMT = "%H:%M:%S / %d-%b-%Y [%a]"

INLINE_WHITESPACE_RE = re.compile(r"[^\S\n]+")
BLOCK_TAGS = (
    "address",
    "article",
    "blockquote",
    "br",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "tr",
    "ul",
)

_WRAP_CONSOLE = Console(width=200, force_terminal=False, color_system=None)


def now_local() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def parse_date(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        parsed = raw
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone()
    if isinstance(raw, (tuple, struct_time)):
        try:
            parsed = datetime(*list(raw)[:6], tzinfo=timezone.utc)
            return parsed.astimezone()
        except (TypeError, ValueError):
            return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        parsed = date_parser.parse(text)
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()


def _collapse_lines(text: str) -> list[str]:
    lines: list[str] = []
    for line in text.splitlines():
        clean = INLINE_WHITESPACE_RE.sub(" ", line).strip()
        if not clean and (not lines or not lines[-1]):
            continue
        lines.append(clean)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def html_to_lines(raw: str) -> tuple[str, ...]:
    """Convert an HTML fragment to plain text lines.

    Links are numbered inline and listed as footnotes after the text. When the
    markup cannot be converted the raw text is returned split into lines.
    """
    try:
        with warnings.catch_warnings():
            # Descriptions that are just a URL or a file name are still text.
            warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
            soup = BeautifulSoup(raw, "html.parser")
        for tag in soup.find_all(["script", "style"]):
            tag.decompose()
        links: list[str] = []
        for anchor in soup.find_all("a", href=True):
            href = str(anchor["href"]).strip()
            if not href or href.startswith("#"):
                continue
            links.append(href)
            anchor.append(f" [{len(links)}]")
        for tag in soup.find_all(BLOCK_TAGS):
            tag.insert_before("\n")
            tag.insert_after("\n")
        text = soup.get_text()
    except Exception as exc:
        logger.debug("HTML conversion failed, using raw text: %s", exc)
        return tuple(raw.splitlines())

    lines = _collapse_lines(text)
    if links:
        lines.append("")
        lines.extend(f"[{index}]: {href}" for index, href in enumerate(links, start=1))
    return tuple(lines)


@lru_cache(maxsize=4096)
def wrap_lines(text: str, width: int) -> tuple[str, ...]:
    render_width = max(1, width)
    wrapped = Text(text).wrap(_WRAP_CONSOLE, render_width, overflow="fold")
    lines = tuple(line.plain.rstrip() for line in wrapped)
    return lines or ("",)


def human_age(published_at: datetime, now: datetime | None = None) -> str:
    reference = now or now_local()
    delta = (reference - published_at).total_seconds()
    seconds = abs(int(delta))
    if seconds < 10:
        return "now"
    if seconds < 60:
        amount, unit = seconds, "second"
    elif seconds < 3600:
        amount, unit = seconds // 60, "minute"
    elif seconds < 86400:
        amount, unit = seconds // 3600, "hour"
    elif seconds < 86400 * 7:
        amount, unit = seconds // 86400, "day"
    elif seconds < 86400 * 30:
        amount, unit = seconds // (86400 * 7), "week"
    elif seconds < 86400 * 365:
        amount, unit = seconds // (86400 * 30), "month"
    else:
        amount, unit = seconds // (86400 * 365), "year"
    label = f"{amount} {unit}" if amount == 1 else f"{amount} {unit}s"
    if delta < 0:
        return f"in {label}"
    return f"{label} ago"


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    if width <= 1:
        return value[:width]
    return f"{value[: width - 1]}…"
