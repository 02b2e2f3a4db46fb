from __future__ import annotations

from dpkgreport.core.models import CATEGORIES, ReportData, TimeWindow
from dpkgreport.core.version import get_version


CATEGORY_TITLES = {
    "newly_installed": "Newly installed",
    "upgraded": "Upgraded",
    "removed": "Removed",
    "half_installed": "Half installed",
    "half_configured": "Half configured",
    "installed_and_removed": "Installed and removed",
}


def render_markdown(report: ReportData, window: TimeWindow | None = None) -> str:
    """Render one report as Markdown.

    Args:
        report (ReportData): Filtered report data.
        window (TimeWindow | None): Time range shown in the header.

    Returns:
        str: Markdown content; empty categories are left out.
    """
    lines = [
        f"# dpkg report: {report.label}",
        "",
        f"dpkg-report version: {get_version()}",
        f"Scope: {_scope_description(report)}",
    ]
    if window is not None:
        lines.append(f"Period: {format_window(window)}")
    if report.merge:
        lines.append("Merged: changes shared with a wider scope are listed in that scope's report.")

    if report.no_data:
        lines.extend(["", "No package changes."])
        return "\n".join(lines) + "\n"

    lines.extend(["", "## Summary"])
    for category in CATEGORIES:
        count = len(report.categories.get(category, []))
        if count:
            lines.append(f"- {CATEGORY_TITLES[category]}: {count}")

    for category in CATEGORIES:
        rows = report.categories.get(category, [])
        if not rows:
            continue
        lines.extend(["", f"## {CATEGORY_TITLES[category]}", "Package | Version | Previous version | Status", "---|---|---|---"])
        for row in rows:
            lines.append(
                f"{row['name']} | {row['version'] or '-'} | {row['old_version'] or '-'} | {row['status'] or '-'}"
            )
    return "\n".join(lines) + "\n"


def format_window(window: TimeWindow) -> str:
    end = window.end.strftime("%Y-%m-%d %H:%M:%S")
    if window.start is None:
        return f"until {end}"
    return f"{window.start.strftime('%Y-%m-%d %H:%M:%S')} to {end}"


def _scope_description(report: ReportData) -> str:
    if report.kind == "all":
        return "changes common to every host"
    if report.kind == "group":
        return f"changes common to every {report.label} host"
    return f"host {report.label}"
