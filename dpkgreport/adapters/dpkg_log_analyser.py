from __future__ import annotations

import gzip
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator

from dpkgreport.core.models import TimeWindow


logger = logging.getLogger(__name__)

NONE_VERSION = "<none>"
PACKAGE_ACTIONS = {"install", "upgrade", "remove", "purge"}
REMOVED_STATES = {"not-installed", "config-files"}


@dataclass(frozen=True)
class PackageChange:
    name: str
    version: str
    previous_version: str
    status: str


@dataclass
class _PackageState:
    first_old_version: str | None = None
    version: str | None = None
    status: str | None = None


class DpkgLogAnalyser:
    """Summarize a dpkg.log file into categorized package changes.

    Each package is classified from the first "old" version seen in the
    window and the last status dpkg recorded for it, so an install followed
    by a removal inside the window shows up as ``installed_and_removed``.
    """
    def analyse(self, path: str, window: TimeWindow) -> dict[str, dict[str, PackageChange]]:
        """Parse a log file and classify every package it touched.

        Raises:
            OSError: If the file is missing or unreadable.
        """
        states = self._collect_states(_read_lines(path), window, path)
        categories: dict[str, dict[str, PackageChange]] = {}
        for name in sorted(states):
            state = states[name]
            category = _classify(state)
            if category is None:
                continue
            categories.setdefault(category, {})[name] = PackageChange(
                name=name,
                version=state.version or NONE_VERSION,
                previous_version=state.first_old_version or NONE_VERSION,
                status=state.status or "",
            )
        return categories

    @staticmethod
    def _collect_states(lines: Iterable[str], window: TimeWindow, path: str) -> dict[str, _PackageState]:
        states: dict[str, _PackageState] = {}
        skipped = 0
        for line in lines:
            parts = line.split()
            if len(parts) < 3:
                if parts:
                    skipped += 1
                continue
            try:
                moment = datetime.strptime(f"{parts[0]} {parts[1]}", "%Y-%m-%d %H:%M:%S")
            except ValueError:
                skipped += 1
                continue
            if not window.contains(moment):
                continue

            action = parts[2]
            if action in PACKAGE_ACTIONS and len(parts) >= 6:
                state = states.setdefault(_package_name(parts[3]), _PackageState())
                if state.first_old_version is None:
                    state.first_old_version = parts[4]
                state.version = parts[5]
            elif action == "status" and len(parts) >= 6:
                state = states.setdefault(_package_name(parts[4]), _PackageState())
                state.status = parts[3]
                state.version = parts[5]
        if skipped:
            logger.debug("Skipped %d unrecognized line(s) in %s", skipped, path)
        return states


def _classify(state: _PackageState) -> str | None:
    if state.status == "half-installed":
        return "half_installed"
    if state.status == "half-configured":
        return "half_configured"
    if state.first_old_version is None:
        return None
    installed_here = state.first_old_version == NONE_VERSION
    if state.status == "installed":
        if installed_here:
            return "newly_installed"
        if state.version != state.first_old_version:
            return "upgraded"
        return None
    if state.status in REMOVED_STATES:
        return "installed_and_removed" if installed_here else "removed"
    return None


def _package_name(value: str) -> str:
    return value.split(":", 1)[0]


def _read_lines(path: str) -> Iterator[str]:
    source = Path(path)
    if source.suffix == ".gz":
        with gzip.open(source, "rt", encoding="utf-8", errors="replace") as handle:
            yield from handle
        return
    with source.open("r", encoding="utf-8", errors="replace") as handle:
        yield from handle
