from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dpkgreport.core.fleet import FleetAggregator
from dpkgreport.core.models import ALL_IDENTIFIER, CATEGORIES, EventRecord, HostReport
from dpkgreport.core.sources import group_key, has_group


logger = logging.getLogger(__name__)


@dataclass
class CommonSubsets:
    """Events shared by every member of a reporting scope.

    ``events`` maps a scope identifier (``"all"`` or a group key) to the
    agreed record per category and package name. ``groups`` lists the member
    hostnames of each discovered group.
    """
    events: dict[str, dict[str, dict[str, EventRecord]]] = field(default_factory=dict)
    groups: dict[str, list[str]] = field(default_factory=dict)

    @property
    def buckets(self) -> dict[str, dict[str, set[str]]]:
        return {
            identifier: {category: set(records) for category, records in categories.items()}
            for identifier, categories in self.events.items()
        }

    def contains(self, identifier: str, category: str, package_name: str) -> bool:
        return package_name in self.events.get(identifier, {}).get(category, {})

    def scope_events(self, identifier: str) -> dict[str, dict[str, EventRecord]]:
        return self.events.get(identifier, {category: {} for category in CATEGORIES})


def discover_groups(hostnames: set[str] | list[str]) -> dict[str, list[str]]:
    """Cluster hostnames by group key.

    Hosts without a trailing numeric suffix join no group. A host belongs to
    group ``g`` only when its own group key is ``g``, so ``web`` never picks
    up ``webdb1``.
    """
    groups: dict[str, list[str]] = {}
    for hostname in sorted(hostnames):
        if not has_group(hostname):
            continue
        groups.setdefault(group_key(hostname), []).append(hostname)
    return groups


def extract_common_subsets(fleet: FleetAggregator) -> CommonSubsets:
    """Compute the global and per-group common buckets.

    Args:
        fleet (FleetAggregator): Fully populated aggregator; it is not mutated.

    Returns:
        CommonSubsets: ``"all"`` bucket over hosts with data, plus one bucket
            per discovered group over every member host.

    Notes:
        Membership is a universal check over an unordered host set, so the
        result does not depend on the order hosts were added.
    """
    result = CommonSubsets()
    with_data = [fleet.report(name) for name in sorted(fleet.hosts_with_data())]
    result.events[ALL_IDENTIFIER] = _common_events(
        with_data,
        {category: fleet.union(category) for category in CATEGORIES},
    )

    result.groups = discover_groups(fleet.hosts())
    for key, members in result.groups.items():
        reports = [fleet.report(name) for name in members]
        candidates = {
            category: set().union(*(report.events(category).keys() for report in reports))
            for category in CATEGORIES
        }
        result.events[key] = _common_events(reports, candidates)

    logger.debug(
        "Common subsets: %d shared across all hosts, %d groups",
        sum(len(records) for records in result.events[ALL_IDENTIFIER].values()),
        len(result.groups),
    )
    return result


def _common_events(
    reports: list[HostReport],
    candidates: dict[str, set[str]],
) -> dict[str, dict[str, EventRecord]]:
    common: dict[str, dict[str, EventRecord]] = {category: {} for category in CATEGORIES}
    if not reports:
        return common
    for category in CATEGORIES:
        for package_name in sorted(candidates.get(category, set())):
            record = _agreed_record(reports, category, package_name)
            if record is not None:
                common[category][package_name] = record
    return common


def _agreed_record(reports: list[HostReport], category: str, package_name: str) -> EventRecord | None:
    first = reports[0].get(category, package_name)
    if first is None:
        return None
    for report in reports[1:]:
        if report.get(category, package_name) != first:
            return None
    return first
