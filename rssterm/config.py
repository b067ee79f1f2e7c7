from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from rssterm import APP_NAME, __version__
from rssterm.fetcher import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RSSTERM_CONFIG"
FEEDS_FILE_NAME = "feeds"
VALID_URL_SCHEMES = {"http", "https"}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class AppConfig:
    fps: float
    show_fps: bool
    feeds_file: Path
    request_timeout: float
    max_workers: int
    log_file: Path | None
    log_level: str
    command: str | None

    @property
    def tick_seconds(self) -> float:
        if self.fps == 0:
            return 0.0
        return 1.0 / self.fps


def default_feeds_file() -> Path:
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    config_home = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home).expanduser() / APP_NAME / FEEDS_FILE_NAME


def is_valid_source_url(raw: str) -> bool:
    try:
        parts = urlsplit(raw)
    except ValueError:
        return False
    return parts.scheme.lower() in VALID_URL_SCHEMES and bool(parts.netloc)


def parse_source_list(content: str) -> list[str]:
    sources: list[str] = []
    for line in content.splitlines():
        candidate = line.strip()
        if not candidate:
            continue
        if not is_valid_source_url(candidate):
            logger.debug("Skipping invalid feed URL: %s", candidate)
            continue
        sources.append(candidate)
    return sources


def read_source_list(path: Path) -> list[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("Feeds file %s does not exist", path)
        return []
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read feeds file %s: %s", path, exc)
        return []
    return parse_source_list(content)


def parse_args(argv: list[str]) -> AppConfig:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Read RSS and Atom feeds in the terminal.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--fps",
        type=float,
        default=60.0,
        help="Target rendering FPS (use 0 for uncapped)",
    )
    parser.add_argument("--show-fps", action="store_true")
    parser.add_argument(
        "--feeds",
        default=None,
        help=f"Feeds file (defaults to ${CONFIG_ENV_VAR} or ~/.config/{APP_NAME}/{FEEDS_FILE_NAME})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help="Per-feed request timeout in seconds; quitting waits at most this long for a hung request",
    )
    parser.add_argument("--workers", type=int, default=DEFAULT_MAX_WORKERS)
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING")

    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("feeds", help="Print the path of the feeds file")

    args = parser.parse_args(argv)

    if args.fps < 0:
        raise ValueError("--fps must be >= 0")
    if args.timeout <= 0:
        raise ValueError("--timeout must be > 0")
    if args.workers < 1:
        raise ValueError("--workers must be >= 1")

    feeds_file = Path(args.feeds).expanduser() if args.feeds else default_feeds_file()
    return AppConfig(
        fps=args.fps,
        show_fps=args.show_fps,
        feeds_file=feeds_file,
        request_timeout=args.timeout,
        max_workers=args.workers,
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
        log_level=args.log_level,
        command=args.command,
    )
