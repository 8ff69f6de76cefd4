from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from flowgraph.core.models import FlowReport


def _iso_utc(ts: datetime) -> str:
    # same shape as JS Date.toISOString(): 2024-01-01T00:00:00.000Z
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def report_to_dict(r: FlowReport) -> Dict[str, Any]:
    return {
        "period": r.period,
        "lastUpdated": _iso_utc(r.last_updated),
        "totalVolume": r.total_volume,
        "flows": [
            {
                "source": f.source,
                "target": f.target,
                "volume": f.volume,
            }
            for f in r.flows
        ],
    }
