from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Entry:
    id: int
    title: str | None
    url: str | None
    authors: tuple[str, ...]
    body: tuple[str, ...] | None
    summary: tuple[str, ...] | None
    published_at: datetime
    source_url: str = field(default="", compare=False)

    @property
    def content_lines(self) -> tuple[str, ...] | None:
        if self.body is not None:
            return self.body
        return self.summary
