from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from dpkgreport.core.fleet import FleetAggregator
from dpkgreport.core.host_analysis import analyse_source, build_host_report
from dpkgreport.core.merge import CommonSubsets, extract_common_subsets
from dpkgreport.core.models import AnalysisOutcome, LogSource, ReportData, TimeWindow
from dpkgreport.core.report_data import build_report_data, report_targets, source_events
from dpkgreport.ports.log_analyser import LogAnalyser
from dpkgreport.ports.report_emitter import ReportEmitter


logger = logging.getLogger(__name__)


class ReportEmissionError(RuntimeError):
    def __init__(self, label: str, cause: Exception) -> None:
        super().__init__(f"Failed to emit report {label}: {cause}")
        self.label = label
        self.cause = cause


@dataclass
class RunSummary:
    sources: int
    failures: dict[str, str]
    hosts: list[str]
    groups: list[str]
    merge: bool
    outputs: list[str] = field(default_factory=list)
    reports: list[ReportData] = field(default_factory=list)


class ReportPipeline:
    """Analyse log sources, reconcile hosts and emit every report of a run."""
    def __init__(
        self,
        analyser: LogAnalyser,
        emitters: list[ReportEmitter],
        workers: int = 4,
    ) -> None:
        self.analyser = analyser
        self.emitters = emitters
        self.workers = max(int(workers), 1)

    def run(self, sources: list[LogSource], window: TimeWindow, merge: bool) -> RunSummary:
        """Run the reporting pipeline end-to-end.

        Args:
            sources (list[LogSource]): Log sources with resolved hostnames.
            window (TimeWindow): Time range applied to every source.
            merge (bool): Whether to compute common subsets and suppress
                shared events from narrower reports.

        Returns:
            RunSummary: Hosts, groups, failures and emitted locations.

        Raises:
            ReportEmissionError: If any emitter fails; the run stops there.
        """
        outcomes = self.analyse(sources, window)
        fleet = build_fleet(outcomes)
        subsets = extract_common_subsets(fleet) if merge else None
        reports = build_reports(fleet, subsets, merge)

        summary = RunSummary(
            sources=len(sources),
            failures={item.source.path: item.error or "" for item in outcomes if not item.ok},
            hosts=sorted(fleet.hosts()),
            groups=sorted(subsets.groups) if subsets is not None else [],
            merge=merge,
            reports=reports,
        )
        for report in reports:
            for emitter in self.emitters:
                try:
                    summary.outputs.append(emitter.emit(report))
                except Exception as exc:
                    raise ReportEmissionError(report.label, exc) from exc
        logger.info(
            "Processed %d source(s) for %d host(s); %d report(s) emitted",
            summary.sources,
            len(summary.hosts),
            len(reports),
        )
        return summary

    def analyse(self, sources: list[LogSource], window: TimeWindow) -> list[AnalysisOutcome]:
        """Analyse sources concurrently, returning outcomes in source order."""
        if not sources:
            return []
        with ThreadPoolExecutor(max_workers=min(self.workers, len(sources))) as pool:
            futures = [pool.submit(analyse_source, self.analyser, source, window) for source in sources]
            return [future.result() for future in futures]


def build_fleet(outcomes: list[AnalysisOutcome]) -> FleetAggregator:
    fleet = FleetAggregator()
    for outcome in outcomes:
        fleet.add(build_host_report(outcome))
    return fleet


def build_reports(fleet: FleetAggregator, subsets: CommonSubsets | None, merge: bool) -> list[ReportData]:
    return [
        build_report_data(target, source_events(target, fleet, subsets), subsets, merge)
        for target in report_targets(fleet, subsets)
    ]
