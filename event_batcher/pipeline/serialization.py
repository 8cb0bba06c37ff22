"""NDJSON encoding and batch object keys.

A batch file is one JSON object per line, ``\\n``-separated, with a trailing
newline, UTF-8 encoded. Keys look like::

    events/batch-2026-01-15T10-00-00-123456Z.ndjson
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable

NDJSON_CONTENT_TYPE = "application/x-ndjson"
KEY_PREFIX = "events/batch-"
KEY_SUFFIX = ".ndjson"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(instant: datetime, timespec: str = "milliseconds") -> str:
    """ISO-8601 in UTC with a ``Z`` suffix instead of ``+00:00``."""
    return instant.astimezone(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")


def now_iso() -> str:
    """Server receive time stamped onto each event."""
    return iso_utc(now_utc())


def batch_key(instant: datetime) -> str:
    stamp = iso_utc(instant, timespec="microseconds").replace(":", "-").replace(".", "-")
    return f"{KEY_PREFIX}{stamp}{KEY_SUFFIX}"


def to_ndjson(records: Iterable[dict[str, Any]]) -> bytes:
    lines = [json.dumps(r, ensure_ascii=False, separators=(",", ":")) for r in records]
    if not lines:
        return b""
    return ("\n".join(lines) + "\n").encode("utf-8")


def from_ndjson(data: bytes) -> list[dict[str, Any]]:
    return [json.loads(line) for line in data.decode("utf-8").splitlines() if line.strip()]
