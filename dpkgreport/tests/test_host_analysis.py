from dataclasses import dataclass
from datetime import datetime

from dpkgreport.core.host_analysis import analyse_source, build_host_report
from dpkgreport.core.models import CATEGORIES, EventRecord, LogSource, TimeWindow


WINDOW = TimeWindow(end=datetime(2026, 10, 18, 23, 59, 59))


@dataclass
class Change:
    name: str
    version: str
    previous_version: str | None
    status: str


class StaticAnalyser:
    def __init__(self, result: dict) -> None:
        self.result = result
        self.calls: list[tuple[str, TimeWindow]] = []

    def analyse(self, path: str, window: TimeWindow) -> dict:
        self.calls.append((path, window))
        return self.result


class BrokenAnalyser:
    def analyse(self, path: str, window: TimeWindow) -> dict:
        raise OSError(f"cannot read {path}")


def test_success_converts_changes_to_records() -> None:
    analyser = StaticAnalyser(
        {
            "newly_installed": {"nginx": Change("nginx", "1.18.0", None, "installed")},
            "unknown_category": {"x": Change("x", "1", "0", "installed")},
        }
    )
    source = LogSource(path="/logs/web1.dpkg.log", hostname="web1")

    outcome = analyse_source(analyser, source, WINDOW)
    report = build_host_report(outcome)

    assert outcome.ok is True
    assert analyser.calls == [("/logs/web1.dpkg.log", WINDOW)]
    assert report.hostname == "web1"
    assert report.no_data is False
    assert report.get("newly_installed", "nginx") == EventRecord("nginx", "newly_installed", "1.18.0", "", "installed")
    assert set(report.categories) == set(CATEGORIES)


def test_failure_degrades_to_no_data(caplog) -> None:
    source = LogSource(path="/logs/broken.dpkg.log", hostname="broken")

    outcome = analyse_source(BrokenAnalyser(), source, WINDOW)
    report = build_host_report(outcome)

    assert outcome.ok is False
    assert "OSError" in outcome.error
    assert report.no_data is True
    assert all(not events for events in report.categories.values())
    assert "/logs/broken.dpkg.log" in caplog.text


def test_no_changes_is_no_data_but_not_failure() -> None:
    source = LogSource(path="/logs/quiet.dpkg.log", hostname="quiet")

    outcome = analyse_source(StaticAnalyser({}), source, WINDOW)
    report = build_host_report(outcome)

    assert outcome.ok is True
    assert report.no_data is True
    assert set(report.categories) == set(CATEGORIES)
