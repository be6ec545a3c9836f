"""
Export of the monthly history as downloadable artifacts.

JSON is a bare array of points with exactly the EXPORT_FIELDS keys.
"""

import csv
import io
import json
import time
from typing import Iterable, Optional

from .constants import EXPORT_FIELDS
from .records import ProjectionPoint


def export_filename(ext: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"landshare_backtest_{timestamp_ms}.{ext}"


def history_to_json(history: Iterable[ProjectionPoint]) -> str:
    return json.dumps([p.to_dict() for p in history], indent=2)


def history_to_csv(history: Iterable[ProjectionPoint]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(EXPORT_FIELDS), lineterminator="\n")
    writer.writeheader()
    for point in history:
        writer.writerow(point.to_dict())
    return output.getvalue()
