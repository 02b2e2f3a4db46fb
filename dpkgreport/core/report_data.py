from __future__ import annotations

from dpkgreport.core.fleet import FleetAggregator
from dpkgreport.core.merge import CommonSubsets
from dpkgreport.core.models import ALL_IDENTIFIER, CATEGORIES, EventRecord, ReportData, ReportTarget
from dpkgreport.core.sources import group_key, has_group


_KIND_ORDER = {"all": 0, "group": 1, "host": 2}


def report_targets(fleet: FleetAggregator, subsets: CommonSubsets | None) -> list[ReportTarget]:
    """List the reports of a run in emission order.

    Without merge data only host reports exist. With it, ``all`` comes first
    and the rest sort by identifier, a group ahead of a same-named host.
    """
    targets = [ReportTarget(kind="host", identifier=name) for name in fleet.hosts()]
    if subsets is not None:
        targets.append(ReportTarget(kind="all", identifier=ALL_IDENTIFIER))
        targets.extend(ReportTarget(kind="group", identifier=key) for key in subsets.groups)
    return sorted(
        targets,
        key=lambda item: (item.kind != "all", item.identifier, _KIND_ORDER[item.kind]),
    )


def source_events(
    target: ReportTarget,
    fleet: FleetAggregator,
    subsets: CommonSubsets | None,
) -> dict[str, dict[str, EventRecord]]:
    """Raw per-category data a report is built from.

    A host report starts from the host's own events; ``all`` and group reports
    start from the events their members share.
    """
    if target.kind == "host":
        return fleet.report(target.identifier).categories
    if subsets is None:
        return {category: {} for category in CATEGORIES}
    return subsets.scope_events(target.identifier)


def build_report_data(
    target: ReportTarget,
    categories: dict[str, dict[str, EventRecord]],
    subsets: CommonSubsets | None,
    merge: bool,
) -> ReportData:
    """Filter one report's events down to what it should display.

    Args:
        target (ReportTarget): Report being built.
        categories (dict): Raw events per category for the target.
        subsets (CommonSubsets | None): Common buckets from the merge step.
        merge (bool): Whether merge mode is enabled.

    Returns:
        ReportData: Display-ready events; ``no_data`` is set when every
            category ends up empty.

    Notes:
        An event shared by all hosts is only shown in the ``all`` report, and
        one shared by a group only in that group's report, so no event shows
        up twice across tiers.
    """
    suppress = merge and subsets is not None
    scope = _group_scope(target)
    output: dict[str, list[dict[str, str]]] = {}
    for category in CATEGORIES:
        rows: list[dict[str, str]] = []
        events = categories.get(category, {})
        for package_name in sorted(events):
            if suppress:
                if target.kind != "all" and subsets.contains(ALL_IDENTIFIER, category, package_name):
                    continue
                if scope is not None and subsets.contains(scope, category, package_name):
                    continue
            record = events[package_name]
            rows.append(
                {
                    "name": package_name,
                    "version": record.version or "",
                    "old_version": record.previous_version or "",
                    "status": record.status or "",
                }
            )
        output[category] = rows

    return ReportData(
        label=target.label,
        identifier=target.identifier,
        kind=target.kind,
        no_data=not any(output.values()),
        merge=merge,
        categories=output,
    )


def _group_scope(target: ReportTarget) -> str | None:
    if target.kind == "host" and has_group(target.identifier):
        return group_key(target.identifier)
    return None
