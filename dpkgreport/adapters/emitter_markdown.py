from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from dpkgreport.core.models import ReportData, TimeWindow
from dpkgreport.core.render import render_markdown


@dataclass
class MarkdownReportEmitter:
    """Write Markdown reports to a directory, or to a text stream."""
    out_dir: str | None = None
    window: TimeWindow | None = None
    stream: TextIO | None = None

    def emit(self, report: ReportData) -> str:
        content = render_markdown(report, self.window)
        if self.out_dir is None:
            stream = self.stream or sys.stdout
            stream.write(content)
            stream.write("\n")
            return "<stream>"
        path = Path(self.out_dir) / f"{report.basename}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)
