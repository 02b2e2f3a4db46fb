from __future__ import annotations

import logging

from dpkgreport.core.models import CATEGORIES, HostReport


logger = logging.getLogger(__name__)


class FleetAggregator:
    """Host reports of one run keyed by hostname.

    The aggregator is filled from a single thread and treated as read-only
    once every source has been processed.
    """
    def __init__(self) -> None:
        self._reports: dict[str, HostReport] = {}
        self._union: dict[str, set[str]] = {category: set() for category in CATEGORIES}

    def add(self, report: HostReport) -> None:
        replaced = report.hostname in self._reports
        if replaced:
            logger.warning("Host %s reported twice; keeping the last report", report.hostname)
        self._reports[report.hostname] = report
        if replaced:
            self._rebuild_union()
            return
        for category, events in report.categories.items():
            self._union.setdefault(category, set()).update(events)

    def hosts(self) -> set[str]:
        return set(self._reports)

    def hosts_with_data(self) -> set[str]:
        return {name for name, report in self._reports.items() if not report.no_data}

    def report(self, hostname: str) -> HostReport:
        return self._reports[hostname]

    def union(self, category: str) -> set[str]:
        return set(self._union.get(category, set()))

    def _rebuild_union(self) -> None:
        # An overwritten host may drop packages, so the union is recomputed.
        union: dict[str, set[str]] = {category: set() for category in CATEGORIES}
        for report in self._reports.values():
            for category, events in report.categories.items():
                union.setdefault(category, set()).update(events)
        self._union = union
