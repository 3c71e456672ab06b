"""JSON and CSV export helpers."""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Iterable, Mapping, Sequence

from storefront.catalog.models import AnalyticsEvent

EXPORT_FILENAMES = {
    "supplements": "supplements.json",
    "posts": "posts.json",
    "analytics": "analytics_export.csv",
}


def export_json(records: Iterable[Any]) -> str:
    """Serialize records (anything with ``to_dict``) the way the baseline stores them."""
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def analytics_csv(events: Sequence[AnalyticsEvent | Mapping[str, Any]]) -> str | None:
    rows = [event.to_dict() if isinstance(event, AnalyticsEvent) else dict(event) for event in events]
    if not rows:
        return None
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(rows[0].keys()),
        restval="",
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()
