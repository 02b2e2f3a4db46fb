from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


CATEGORIES = (
    "newly_installed",
    "upgraded",
    "removed",
    "half_installed",
    "half_configured",
    "installed_and_removed",
)

ALL_IDENTIFIER = "all"


@dataclass(frozen=True)
class EventRecord:
    """One package change in one category on one host."""
    package_name: str
    category: str
    version: str
    previous_version: str
    status: str


@dataclass(frozen=True)
class HostReport:
    """Categorized package changes for one host and one run window."""
    hostname: str
    no_data: bool
    categories: dict[str, dict[str, EventRecord]] = field(default_factory=dict)

    @staticmethod
    def empty(hostname: str) -> "HostReport":
        return HostReport(
            hostname=hostname,
            no_data=True,
            categories={category: {} for category in CATEGORIES},
        )

    def events(self, category: str) -> dict[str, EventRecord]:
        return self.categories.get(category, {})

    def get(self, category: str, package_name: str) -> EventRecord | None:
        return self.events(category).get(package_name)


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive time range; a missing start means no lower bound."""
    end: datetime
    start: datetime | None = None

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        return moment <= self.end


@dataclass(frozen=True)
class LogSource:
    path: str
    hostname: str


@dataclass
class AnalysisOutcome:
    """Result of analysing one log source."""
    source: LogSource
    ok: bool
    categories: dict[str, dict[str, EventRecord]] = field(default_factory=dict)
    error: str | None = None


@dataclass(frozen=True)
class ReportTarget:
    kind: str
    identifier: str

    @property
    def label(self) -> str:
        if self.kind == "group":
            return f"{self.identifier}*"
        return self.identifier


@dataclass
class ReportData:
    """Filtered, display-ready data handed to report emitters."""
    label: str
    identifier: str
    kind: str
    no_data: bool
    merge: bool
    categories: dict[str, list[dict[str, str]]]

    @property
    def basename(self) -> str:
        if self.kind == "all":
            return ALL_IDENTIFIER
        return f"{self.kind}-{self.identifier}"

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "identifier": self.identifier,
            "kind": self.kind,
            "no_data": self.no_data,
            "merge": self.merge,
            "categories": {key: [dict(item) for item in value] for key, value in self.categories.items()},
        }
