from __future__ import annotations

"""dpkg-report command-line interface entrypoint."""

import argparse
import logging
import os
import sys

import yaml

from dpkgreport.adapters.dpkg_log_analyser import DpkgLogAnalyser
from dpkgreport.adapters.emitter_json import JsonReportEmitter
from dpkgreport.adapters.emitter_markdown import MarkdownReportEmitter
from dpkgreport.adapters.emitter_pdf import PdfReportEmitter
from dpkgreport.core.models import TimeWindow
from dpkgreport.core.pipeline import ReportEmissionError, ReportPipeline
from dpkgreport.core.settings import TRUE_VALUES, Settings, parse_formats
from dpkgreport.core.sources import expand_sources
from dpkgreport.core.version import get_version
from dpkgreport.core.window import select_time_window
from dpkgreport.ports.report_emitter import ReportEmitter


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean from the environment with a safe default."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in TRUE_VALUES


def _parse_bool(value: str | None) -> bool:
    """Parse optional boolean flags that allow an implicit True value."""
    if value is None:
        return True
    return value.lower() in TRUE_VALUES


def configure_logging(level: str) -> None:
    """Configure stderr logging for the run."""
    lvl = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=lvl, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def load_settings(args: argparse.Namespace) -> Settings:
    """Combine the optional settings file with command-line overrides.

    Notes:
        Flags win over the settings file; DPKG_REPORT_MERGE only provides the
        merge default when neither sets it.
    """
    if args.config:
        settings = Settings.from_file(args.config)
    else:
        settings = Settings(merge=_env_bool("DPKG_REPORT_MERGE", False))

    if args.hostname:
        settings.hostname = args.hostname
    if args.log_file:
        settings.log_files = list(args.log_file)
    if args.merge is not None:
        settings.merge = args.merge
    if args.window:
        settings.window = args.window
    if args.format:
        settings.formats = parse_formats(args.format)
    if args.out:
        settings.out_dir = args.out
    if args.workers is not None:
        settings.workers = args.workers
    if args.log_level:
        settings.log_level = args.log_level
    settings.validate()
    return settings


def build_emitters(settings: Settings, window: TimeWindow) -> list[ReportEmitter]:
    emitters: list[ReportEmitter] = []
    for fmt in settings.formats:
        if fmt == "markdown":
            emitters.append(MarkdownReportEmitter(out_dir=settings.out_dir, window=window))
        elif fmt == "json":
            emitters.append(JsonReportEmitter(out_dir=settings.out_dir, window=window))
        elif fmt == "pdf":
            emitters.append(PdfReportEmitter(out_dir=settings.out_dir, window=window))
    return emitters


def report_command(args: argparse.Namespace) -> int:
    """Analyse the configured logs and emit every report of the run."""
    try:
        settings = load_settings(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    window = select_time_window(settings.window)
    sources = expand_sources(settings.log_files, settings.hostname)
    pipeline = ReportPipeline(DpkgLogAnalyser(), build_emitters(settings, window), workers=settings.workers)
    try:
        summary = pipeline.run(sources, window, merge=settings.merge)
    except ReportEmissionError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    for path, error in summary.failures.items():
        print(f"No data from {path}: {error}", file=sys.stderr)
    if settings.out_dir:
        print(
            "Report run complete: "
            f"hosts={len(summary.hosts)} groups={len(summary.groups)} "
            f"reports={len(summary.reports)} out={settings.out_dir}",
            file=sys.stderr,
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpkg-report",
        description="Summarize dpkg package changes per host, per host group and across a fleet.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    parser.add_argument("--config", default=None, help="Path to settings.yaml")
    parser.add_argument("--hostname", default=None, help="Hostname for logs that do not name one")
    parser.add_argument(
        "--log-file",
        action="append",
        default=None,
        help="dpkg log file or directory of logs (repeatable)",
    )
    parser.add_argument(
        "--merge",
        nargs="?",
        const=True,
        default=None,
        type=_parse_bool,
        help="Report common changes once for all hosts and host groups (true/false)",
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument("--today", dest="window", action="store_const", const="today", help="Only today's changes")
    window.add_argument(
        "--two-days",
        dest="window",
        action="store_const",
        const="two_days",
        help="Changes since yesterday",
    )
    window.add_argument(
        "--last-week",
        dest="window",
        action="store_const",
        const="last_week",
        help="Changes of the last seven days",
    )
    window.add_argument(
        "--last-month",
        dest="window",
        action="store_const",
        const="last_month",
        help="Changes of the last thirty days",
    )
    parser.add_argument("--format", default=None, help="Output formats: markdown,json,pdf or all")
    parser.add_argument("--out", default=None, help="Output directory for report files")
    parser.add_argument("--workers", type=int, default=None, help="Parallel log analysis workers")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic logging level",
    )
    parser.set_defaults(func=report_command)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
