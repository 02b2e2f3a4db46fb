from __future__ import annotations

from typing import Protocol

from dpkgreport.core.models import ReportData


class ReportEmitter(Protocol):
    """Rendering boundary for built report data."""
    def emit(self, report: ReportData) -> str:
        """Render one report.

        Args:
            report (ReportData): Filtered report data for one identifier.

        Returns:
            str: Location the report was written to.
        """
        ...
