from __future__ import annotations

import re
from datetime import datetime, timezone

from event_batcher.pipeline.serialization import (
    batch_key,
    from_ndjson,
    iso_utc,
    now_iso,
    to_ndjson,
)

KEY_RE = re.compile(r"^events/batch-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z\.ndjson$")


def test_ndjson_one_object_per_line_with_trailing_newline():
    data = to_ndjson([{"name": "a", "n": 1}, {"name": "b"}])
    assert data == b'{"name":"a","n":1}\n{"name":"b"}\n'


def test_ndjson_empty_batch():
    assert to_ndjson([]) == b""


def test_ndjson_is_utf8():
    data = to_ndjson([{"name": "café ☕"}])
    assert data == '{"name":"café ☕"}\n'.encode("utf-8")


def test_ndjson_round_trip_preserves_records():
    records = [
        {"name": "signup", "properties": {"plan": "pro", "seats": 3}, "value": None},
        {"name": "click", "tags": ["a", "b"], "nested": {"deep": [1, 2.5, True]}},
    ]
    assert from_ndjson(to_ndjson(records)) == records


def test_from_ndjson_ignores_blank_lines():
    assert from_ndjson(b'{"name":"a"}\n\n{"name":"b"}\n') == [{"name": "a"}, {"name": "b"}]


def test_batch_key_replaces_colons_and_periods():
    instant = datetime(2026, 1, 15, 10, 0, 0, 123456, tzinfo=timezone.utc)
    assert batch_key(instant) == "events/batch-2026-01-15T10-00-00-123456Z.ndjson"


def test_batch_key_shape_for_now():
    assert KEY_RE.match(batch_key(datetime.now(timezone.utc)))


def test_iso_utc_uses_z_suffix_and_converts_offsets():
    from datetime import timedelta

    tz = timezone(timedelta(hours=2))
    instant = datetime(2026, 1, 15, 12, 0, 0, tzinfo=tz)
    assert iso_utc(instant) == "2026-01-15T10:00:00.000Z"


def test_now_iso_is_parseable_utc():
    stamp = now_iso()
    assert stamp.endswith("Z")
    parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    assert parsed.utcoffset().total_seconds() == 0
