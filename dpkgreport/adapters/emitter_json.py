from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from dpkgreport.core.models import ReportData, TimeWindow
from dpkgreport.core.version import get_version


@dataclass
class JsonReportEmitter:
    out_dir: str
    window: TimeWindow | None = None

    def emit(self, report: ReportData) -> str:
        """Write report data as JSON for downstream tooling."""
        payload = report.as_dict()
        payload["generator"] = {"name": "dpkg-report", "version": get_version()}
        if self.window is not None:
            payload["window"] = {
                "start": self.window.start.isoformat() if self.window.start else None,
                "end": self.window.end.isoformat(),
            }
        path = Path(self.out_dir) / f"{report.basename}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        return str(path)
