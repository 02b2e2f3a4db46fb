from __future__ import annotations

import logging
import re
from pathlib import Path

from dpkgreport.core.models import LogSource


logger = logging.getLogger(__name__)

_HOST_LOG_NAME = re.compile(r"^(?P<name>.+)\.dpkg\.log$")
_TRAILING_DIGITS = re.compile(r"\d+$")


def resolve_hostname(path: str, default_hostname: str) -> str:
    """Pick the hostname a log source reports for.

    A base name of the form ``<name>.dpkg.log`` overrides the default
    hostname. Rotated files such as ``<name>.dpkg.log.1.gz`` keep the
    default, so they never replace the host's current log.
    """
    match = _HOST_LOG_NAME.match(Path(path).name)
    if match:
        return match.group("name")
    return default_hostname


def group_key(hostname: str) -> str:
    """Strip the trailing run of digits from a hostname."""
    return _TRAILING_DIGITS.sub("", hostname)


def has_group(hostname: str) -> bool:
    key = group_key(hostname)
    return bool(key) and key != hostname


def expand_sources(paths: list[str], default_hostname: str) -> list[LogSource]:
    """Expand configured paths into individual log sources.

    Args:
        paths (list[str]): Log files or directories.
        default_hostname (str): Hostname used when a file name carries none.

    Returns:
        list[LogSource]: Sources in configuration order; directories expand to
            their immediate files sorted by name.

    Notes:
        Paths that do not exist, and directories that cannot be listed, are
        kept as sources so their analysis failure shows up as a no-data host
        instead of aborting the run or silently disappearing.
    """
    sources: list[LogSource] = []
    for value in paths:
        path = Path(value).expanduser()
        if path.is_dir():
            try:
                children = sorted(child for child in path.iterdir() if child.is_file())
            except OSError as exc:
                logger.warning("Cannot list log directory %s: %s", path, exc)
                sources.append(LogSource(path=str(path), hostname=default_hostname))
                continue
            if not children:
                logger.warning("Log directory %s has no entries", path)
            for child in children:
                sources.append(LogSource(path=str(child), hostname=resolve_hostname(str(child), default_hostname)))
            continue
        sources.append(LogSource(path=str(path), hostname=resolve_hostname(str(path), default_hostname)))
    return sources
