"""
Vision model response parsing.

The model is asked for a bare JSON array of {label, count, confidence?}
objects but may wrap it in prose or code fences, quote numbers, or repeat
labels. normalize_vision_response() turns whatever came back into a clean,
deduplicated list of DetectedItem, or raises VisionResponseError when there
is no array to be found.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from app.schemas.scan import DetectedItem

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200

# Largest value the Integer count column holds.
MAX_COUNT = 2**31 - 1


class VisionResponseError(ValueError):
    """The model output does not contain a usable JSON array."""


def _snippet(text: str) -> str:
    if len(text) <= SNIPPET_LENGTH:
        return text
    return text[:SNIPPET_LENGTH] + "..."


def _parse_json_array(text: str) -> list[Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("[")
        end = text.rfind("]")
        if start == -1 or end == -1 or end < start:
            raise VisionResponseError(f"Model did not return JSON: {_snippet(text)!r}")
        try:
            data = json.loads(text[start:end + 1])
        except json.JSONDecodeError as exc:
            raise VisionResponseError(
                f"Model returned malformed JSON ({exc.msg}): {_snippet(text)!r}"
            ) from exc

    if not isinstance(data, list):
        raise VisionResponseError(
            f"Model output is not an array (got {type(data).__name__}): {_snippet(text)!r}"
        )
    return data


def _to_finite_number(value: Any) -> float | None:
    """Coerce JSON numbers and numeric strings; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _normalize_entry(entry: Any) -> DetectedItem | None:
    if not isinstance(entry, dict):
        return None

    label = entry.get("label")
    if not isinstance(label, str) or not label.strip():
        return None

    count = _to_finite_number(entry.get("count"))
    if count is None or count < 1 or count > MAX_COUNT:
        return None

    confidence = None
    if "confidence" in entry:
        raw_confidence = _to_finite_number(entry["confidence"])
        if raw_confidence is not None:
            confidence = min(1.0, max(0.0, raw_confidence))

    return DetectedItem(
        label=label.strip().lower(),
        count=math.floor(count),
        confidence=confidence,
    )


def normalize_vision_response(text: str) -> list[DetectedItem]:
    """
    Parse raw model output into detected items.

    Entries without a usable label or with a count outside 1..MAX_COUNT
    are skipped. Entries sharing a label (after lowercasing) are merged by
    summing counts, capped at MAX_COUNT; the first entry's confidence wins.

    Raises:
        VisionResponseError: If no JSON array can be extracted.
    """
    data = _parse_json_array(text.strip())

    merged: dict[str, DetectedItem] = {}
    for index, entry in enumerate(data):
        item = _normalize_entry(entry)
        if item is None:
            logger.debug("Skipping invalid vision entry #%s: %r", index, entry)
            continue

        existing = merged.get(item.label)
        if existing is None:
            merged[item.label] = item
        else:
            existing.count = min(existing.count + item.count, MAX_COUNT)

    return list(merged.values())
