"""
Flatten nested Well-Architected responses into independent JSON records.

A lens review holds every pillar summary in one list and an improvements page
holds every improvement in another. Logz.io indexes each shipped line as a
single document, so each element of such a list becomes its own record:

    {"LensReview": {"LensAlias": "wellarchitected",
                    "PillarReviewSummaries": [A, B]}}

becomes

    {"LensReview": {"LensAlias": "wellarchitected", "PillarReviewSummary": A}}
    {"LensReview": {"LensAlias": "wellarchitected", "PillarReviewSummary": B}}

Every record is then stamped with a fixed ``type`` before it is shipped.
"""

import copy
import json
from datetime import date, datetime
from typing import Any

from errors import SerializationError

Record = dict[str, Any]


# ───────────────────────────────────────────────────────────────────
# 1. JSON ROUND-TRIP
# ───────────────────────────────────────────────────────────────────
def _json_default(value: Any) -> Any:
    # boto3 returns timestamps as datetime objects
    if isinstance(value, datetime):
        stamp = value.isoformat()
        # RFC 3339 "Z" for UTC
        return stamp[:-6] + "Z" if stamp.endswith("+00:00") else stamp
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def round_trip(document: Any) -> Record:
    """Return a deep, JSON-only copy of ``document``."""
    try:
        cleaned = json.loads(json.dumps(document, default=_json_default))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"document is not JSON serializable: {e}") from e

    if not isinstance(cleaned, dict):
        raise SerializationError(f"expected a JSON object, got {type(cleaned).__name__}")
    return cleaned


def to_json_bytes(record: Record) -> bytes:
    """Encode a record as compact UTF-8 JSON for the sender."""
    try:
        return json.dumps(record, default=_json_default, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"record is not JSON serializable: {e}") from e


# ───────────────────────────────────────────────────────────────────
# 2. FLATTEN
# ───────────────────────────────────────────────────────────────────
def flatten(document: Any, plural: str, singular: str, parent: str | None = None) -> list[Record]:
    """
    Split ``document`` into one record per element of its ``plural`` list.

    Args:
        document: a JSON-serializable response document.
        plural: name of the list field to expand.
        singular: name of the field that holds one element in each record.
        parent: name of the nested object holding ``plural``, or None when the
            list sits at the top level of the document.

    Returns:
        One record per element, in the original order. An empty or missing
        list yields no records.
    """
    base = round_trip(document)

    container = base
    if parent is not None:
        container = base.get(parent)
        if not isinstance(container, dict):
            raise SerializationError(f"field '{parent}' is not a JSON object")

    items = container.pop(plural, None)
    if items is None:
        items = []
    if not isinstance(items, list):
        raise SerializationError(f"field '{plural}' is not a list")

    records = []
    for item in items:
        record = copy.deepcopy(base)
        target = record if parent is None else record[parent]
        target[singular] = item
        records.append(record)
    return records


# ───────────────────────────────────────────────────────────────────
# 3. TAG
# ───────────────────────────────────────────────────────────────────
def tag(record: Any, sending_type: str) -> Record:
    """Return a copy of ``record`` with its ``type`` field set to ``sending_type``."""
    tagged = round_trip(record)
    tagged["type"] = sending_type
    return tagged
