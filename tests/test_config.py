from pathlib import Path

import pytest

from rssterm.config import (
    CONFIG_ENV_VAR,
    default_feeds_file,
    is_valid_source_url,
    parse_args,
    parse_source_list,
    read_source_list,
)


def test_parse_source_list_skips_blank_and_invalid_lines():
    assert parse_source_list("  \nhttps://example.com/feed\nnot-a-url\n") == ["https://example.com/feed"]


def test_is_valid_source_url():
    assert is_valid_source_url("http://example.com/rss")
    assert is_valid_source_url("HTTPS://example.com/rss")
    assert not is_valid_source_url("ftp://example.com/rss")
    assert not is_valid_source_url("https://")
    assert not is_valid_source_url("example.com/rss")


def test_read_source_list_missing_file(tmp_path):
    assert read_source_list(tmp_path / "missing") == []


def test_read_source_list(tmp_path):
    feeds = tmp_path / "feeds"
    feeds.write_text("https://a.example/rss\n\n  https://b.example/atom  \n", encoding="utf-8")

    assert read_source_list(feeds) == ["https://a.example/rss", "https://b.example/atom"]


def test_default_feeds_file_prefers_env(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "my-feeds"))
    assert default_feeds_file() == tmp_path / "my-feeds"


def test_default_feeds_file_uses_xdg_config_home(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_feeds_file() == tmp_path / "rssterm" / "feeds"


def test_parse_args_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "feeds"))
    config = parse_args([])

    assert config.fps == 60
    assert config.tick_seconds == pytest.approx(1 / 60)
    assert not config.show_fps
    assert config.feeds_file == tmp_path / "feeds"
    assert config.request_timeout == 15
    assert config.max_workers == 8
    assert config.log_file is None
    assert config.log_level == "WARNING"
    assert config.command is None


def test_parse_args_options(tmp_path):
    config = parse_args(
        [
            "--fps",
            "0",
            "--show-fps",
            "--feeds",
            str(tmp_path / "list"),
            "--timeout",
            "2.5",
            "--workers",
            "3",
            "--log-file",
            str(tmp_path / "rssterm.log"),
            "--log-level",
            "DEBUG",
        ]
    )

    assert config.tick_seconds == 0
    assert config.show_fps
    assert config.feeds_file == Path(tmp_path / "list")
    assert config.request_timeout == 2.5
    assert config.max_workers == 3
    assert config.log_file == tmp_path / "rssterm.log"
    assert config.log_level == "DEBUG"


def test_parse_args_feeds_command():
    assert parse_args(["feeds"]).command == "feeds"


@pytest.mark.parametrize(
    "argv",
    [
        ["--fps", "-1"],
        ["--timeout", "0"],
        ["--workers", "0"],
    ],
)
def test_parse_args_rejects_bad_values(argv):
    with pytest.raises(ValueError):
        parse_args(argv)
