from datetime import datetime, timedelta, timezone

import pytest

from rssterm.identity import identify
from rssterm.models import Entry

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_entry():
    def _make_entry(
        title="Test Entry",
        minutes_ago=0,
        url="https://example.com/entry",
        authors=(),
        body=None,
        summary=None,
    ):
        published_at = NOW - timedelta(minutes=minutes_ago)
        return Entry(
            id=identify(title, url, published_at),
            title=title,
            url=url,
            authors=tuple(authors),
            body=body,
            summary=summary,
            published_at=published_at,
        )

    return _make_entry
