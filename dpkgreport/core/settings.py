from __future__ import annotations

import json
import socket
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from dpkgreport.core.window import WINDOW_DAYS


DEFAULT_LOG_FILE = "/var/log/dpkg.log"
SUPPORTED_FORMATS = ("markdown", "json", "pdf")
TRUE_VALUES = {"1", "true", "yes"}


@dataclass
class Settings:
    hostname: str = field(default_factory=socket.gethostname)
    log_files: list[str] = field(default_factory=lambda: [DEFAULT_LOG_FILE])
    merge: bool = False
    window: str | None = None
    formats: list[str] = field(default_factory=lambda: ["markdown"])
    out_dir: str | None = None
    workers: int = 4
    log_level: str = "WARNING"

    @staticmethod
    def from_file(path: str) -> "Settings":
        ext = Path(path).suffix.lower()
        with open(path, "r", encoding="utf-8") as handle:
            if ext in {".yaml", ".yml"}:
                data = yaml.safe_load(handle) or {}
            elif ext == ".json":
                data = json.load(handle)
            else:
                raise ValueError(f"Unsupported settings file extension: {ext}")
        if not isinstance(data, dict):
            raise ValueError(f"Settings file must contain a mapping: {path}")

        log_files = data.get("log_files", [DEFAULT_LOG_FILE])
        if isinstance(log_files, str):
            log_files = [log_files]
        formats = data.get("formats", ["markdown"])
        if isinstance(formats, str):
            formats = parse_formats(formats)

        settings = Settings(
            hostname=str(data.get("hostname") or socket.gethostname()),
            log_files=[str(item) for item in log_files],
            merge=parse_bool(data.get("merge", False)),
            window=data.get("window"),
            formats=[str(item).lower() for item in formats],
            out_dir=data.get("out_dir"),
            workers=int(data.get("workers", 4)),
            log_level=str(data.get("log_level", "WARNING")),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Reject values the pipeline cannot run with.

        Raises:
            ValueError: On an unknown window or format, a worker count below
                one, or a non-Markdown format without an output directory.
        """
        if self.window is not None and self.window not in WINDOW_DAYS:
            raise ValueError(f"Unsupported time window: {self.window}")
        invalid = set(self.formats) - set(SUPPORTED_FORMATS)
        if invalid:
            raise ValueError(f"Unsupported format(s): {', '.join(sorted(invalid))}")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.out_dir is None and set(self.formats) - {"markdown"}:
            raise ValueError("json and pdf formats require an output directory")


def parse_bool(value: object) -> bool:
    """Read a settings flag; strings follow the command-line spelling."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)

def parse_formats(value: str | None) -> list[str]:
    """Parse output formats from a comma-separated string.

    Supported values: markdown, json, pdf, all.
    """
    if not value:
        return ["markdown"]
    if value == "all":
        return list(SUPPORTED_FORMATS)
    formats = [item.strip().lower() for item in value.split(",") if item.strip()]
    invalid = set(formats) - set(SUPPORTED_FORMATS)
    if invalid:
        raise ValueError(f"Unsupported format(s): {', '.join(sorted(invalid))}")
    return formats
