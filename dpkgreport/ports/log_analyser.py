from __future__ import annotations

from typing import Protocol

from dpkgreport.core.models import TimeWindow


class PackageChange(Protocol):
    name: str
    version: str
    previous_version: str
    status: str


class LogAnalyser(Protocol):
    """Parsing boundary turning one log source into categorized changes."""
    def analyse(self, path: str, window: TimeWindow) -> dict[str, dict[str, PackageChange]]:
        """Analyse a log source over a time window.

        Args:
            path (str): Log source to read.
            window (TimeWindow): Only changes inside this range are reported.

        Returns:
            dict: Category name to a mapping of package name to change. An
                empty mapping means no changes were found.

        Raises:
            Exception: Any failure to read or parse the source.
        """
        ...
