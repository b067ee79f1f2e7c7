from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Any

ZERO_ID_SENTINEL = 1

_ABSENT = b"\x00"
_PRESENT = b"\x01"


def _encode_part(value: Any) -> bytes:
    if value is None:
        return _ABSENT
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.isoformat()
    raw = str(value).encode("utf-8", errors="surrogatepass")
    return _PRESENT + len(raw).to_bytes(8, "big") + raw


def identify(title: str | None, descriptive_field: str | None, published_at: Any) -> int:
    digest = hashlib.blake2b(digest_size=8)
    for part in (title, descriptive_field, published_at):
        digest.update(_encode_part(part))
    value = int.from_bytes(digest.digest(), "big")
    # Ids double as "is set" markers, so zero is never handed out.
    return value or ZERO_ID_SENTINEL
