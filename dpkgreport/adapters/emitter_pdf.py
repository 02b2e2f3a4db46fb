from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import Flowable

from dpkgreport.core.models import CATEGORIES, ReportData, TimeWindow
from dpkgreport.core.render import CATEGORY_TITLES, format_window
from dpkgreport.core.version import get_version


HEADER_BACKGROUND = colors.HexColor("#0A1628")


@dataclass
class PdfReportEmitter:
    """Write one PDF document per report."""
    out_dir: str
    window: TimeWindow | None = None

    def emit(self, report: ReportData) -> str:
        path = Path(self.out_dir) / f"{report.basename}.pdf"
        path.parent.mkdir(parents=True, exist_ok=True)
        styles = _styles()
        doc = SimpleDocTemplate(
            str(path),
            pagesize=letter,
            leftMargin=0.8 * inch,
            rightMargin=0.8 * inch,
            topMargin=0.8 * inch,
            bottomMargin=0.8 * inch,
            title=f"dpkg report: {report.label}",
        )
        doc.build(build_story(report, styles, self.window))
        return str(path)


def build_story(report: ReportData, styles: dict, window: TimeWindow | None = None) -> list[Flowable]:
    story: list[Flowable] = [Paragraph(f"dpkg report: {escape(report.label)}", styles["Title"])]
    story.append(Paragraph(f"dpkg-report version: {escape(get_version())}", styles["BodyText"]))
    if window is not None:
        story.append(Paragraph(f"Period: {format_window(window)}", styles["BodyText"]))
    story.append(Spacer(1, 0.2 * inch))

    if report.no_data:
        story.append(Paragraph("No package changes.", styles["BodyText"]))
        return story

    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(create_summary_table(report))
    for category in CATEGORIES:
        rows = report.categories.get(category, [])
        if not rows:
            continue
        story.append(Spacer(1, 0.2 * inch))
        story.append(Paragraph(CATEGORY_TITLES[category], styles["Heading2"]))
        story.append(create_category_table(rows, styles))
    return story


def create_summary_table(report: ReportData) -> Table:
    data = [["Category", "Packages"]]
    for category in CATEGORIES:
        data.append([CATEGORY_TITLES[category], str(len(report.categories.get(category, [])))])
    table = Table(data, hAlign="LEFT", colWidths=[2.4 * inch, 1.0 * inch])
    table.setStyle(_table_style())
    return table


def create_category_table(rows: list[dict[str, str]], styles: dict) -> Table:
    data: list[list[object]] = [["Package", "Version", "Previous version", "Status"]]
    for row in rows:
        data.append(
            [
                Paragraph(escape(row["name"]), styles["TableBody"]),
                Paragraph(escape(row["version"] or "-"), styles["TableBody"]),
                Paragraph(escape(row["old_version"] or "-"), styles["TableBody"]),
                Paragraph(escape(row["status"] or "-"), styles["TableBody"]),
            ]
        )
    table = Table(data, hAlign="LEFT", repeatRows=1, colWidths=[2.2 * inch, 1.6 * inch, 1.6 * inch, 1.3 * inch])
    table.setStyle(_table_style())
    return table


def _table_style() -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BACKGROUND),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
            ("BACKGROUND", (0, 1), (-1, -1), colors.whitesmoke),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
    )


def _styles() -> dict:
    sample = getSampleStyleSheet()
    return {
        "Title": sample["Title"],
        "Heading2": sample["Heading2"],
        "BodyText": sample["BodyText"],
        "TableBody": ParagraphStyle("TableBody", parent=sample["BodyText"], fontSize=8, leading=10),
    }
