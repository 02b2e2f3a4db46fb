from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    try:
        return version("dpkg-report")
    except PackageNotFoundError:
        return "dev"
