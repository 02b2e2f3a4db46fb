from __future__ import annotations

import logging

from dpkgreport.core.models import CATEGORIES, AnalysisOutcome, EventRecord, HostReport, LogSource, TimeWindow
from dpkgreport.ports.log_analyser import LogAnalyser


logger = logging.getLogger(__name__)


def analyse_source(analyser: LogAnalyser, source: LogSource, window: TimeWindow) -> AnalysisOutcome:
    """Run the analyser for one source and capture the result.

    Notes:
        This function does not raise analyser errors; they are converted into
        a failed outcome so one unreadable log never aborts the run.
    """
    try:
        raw = analyser.analyse(source.path, window)
        categories = _to_event_records(raw)
    except Exception as exc:
        logger.warning("Failed to analyse %s for host %s: %s", source.path, source.hostname, exc)
        return AnalysisOutcome(source=source, ok=False, error=f"{type(exc).__name__}: {exc}")
    return AnalysisOutcome(source=source, ok=True, categories=categories)


def build_host_report(outcome: AnalysisOutcome) -> HostReport:
    """Convert an analysis outcome into the host's report.

    A failed outcome yields an empty report; a successful one with no events
    keeps its (empty) category maps but is still flagged as having no data.
    """
    if not outcome.ok:
        return HostReport.empty(outcome.source.hostname)
    categories = {category: dict(outcome.categories.get(category, {})) for category in CATEGORIES}
    no_data = not any(categories.values())
    return HostReport(hostname=outcome.source.hostname, no_data=no_data, categories=categories)


def _to_event_records(raw: dict) -> dict[str, dict[str, EventRecord]]:
    categories: dict[str, dict[str, EventRecord]] = {}
    for category, changes in (raw or {}).items():
        if category not in CATEGORIES:
            logger.debug("Ignoring unknown category %s", category)
            continue
        categories[category] = {
            package_name: EventRecord(
                package_name=package_name,
                category=category,
                version=_display(getattr(change, "version", None)),
                previous_version=_display(getattr(change, "previous_version", None)),
                status=_display(getattr(change, "status", None)),
            )
            for package_name, change in changes.items()
        }
    return categories


def _display(value: object) -> str:
    if value is None:
        return ""
    return str(value)
