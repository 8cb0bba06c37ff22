"""Validation and normalization of a single incoming event."""

from __future__ import annotations

import math
from typing import Any

from event_batcher.pipeline.errors import ValidationError
from event_batcher.pipeline.serialization import now_iso

RECEIVED_AT = "receivedAt"


def _is_blank(value: Any) -> bool:
    """Missing, null, false, empty string, zero and NaN count as no value."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)):
        return value == 0 or math.isnan(value)
    return False


def validate_event(payload: Any) -> dict[str, Any]:
    """Return *payload* if it is a JSON object with a ``name``.

    Any value other than a blank one is a name: ``"  "``, ``42`` and
    ``true`` are all accepted and stored as sent.
    """
    if not isinstance(payload, dict):
        raise ValidationError("$", "Event payload must be a JSON object")
    if _is_blank(payload.get("name")):
        raise ValidationError("name", "Event name is required")
    return payload


def normalize_event(payload: dict[str, Any], received_at: str | None = None) -> dict[str, Any]:
    """Copy of *payload* with the server receive time; the server value wins."""
    record = dict(payload)
    record[RECEIVED_AT] = received_at or now_iso()
    return record
