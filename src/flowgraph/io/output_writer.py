from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from flowgraph.core.models import FlowReport
from flowgraph.io.schemas import report_to_dict


def write_report_json(report: FlowReport, out_path: Union[str, Path]) -> str:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    # overwrites whatever is there
    with p.open("w", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, indent=2)

    return str(p)
