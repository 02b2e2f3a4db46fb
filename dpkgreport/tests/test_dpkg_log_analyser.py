import gzip
from datetime import datetime

import pytest

from dpkgreport.adapters.dpkg_log_analyser import DpkgLogAnalyser, PackageChange
from dpkgreport.core.models import TimeWindow


SAMPLE_LOG = """2026-10-10 09:00:00 startup archives unpack
2026-10-10 09:00:01 install nginx:amd64 <none> 1.18.0-6
2026-10-10 09:00:01 status half-installed nginx:amd64 1.18.0-6
2026-10-10 09:00:02 status unpacked nginx:amd64 1.18.0-6
2026-10-10 09:00:03 configure nginx:amd64 1.18.0-6 <none>
2026-10-10 09:00:03 status half-configured nginx:amd64 1.18.0-6
2026-10-10 09:00:04 status installed nginx:amd64 1.18.0-6
2026-10-10 09:10:00 upgrade libc6:amd64 2.31-1 2.31-2
2026-10-10 09:10:01 status half-configured libc6:amd64 2.31-2
2026-10-10 09:10:02 status installed libc6:amd64 2.31-2
2026-10-11 08:00:00 remove vim:amd64 2:8.2-1 <none>
2026-10-11 08:00:01 status half-installed vim:amd64 2:8.2-1
2026-10-11 08:00:02 status config-files vim:amd64 2:8.2-1
2026-10-11 08:30:00 install tmpkg:all <none> 1.0
2026-10-11 08:30:01 status installed tmpkg:all 1.0
2026-10-11 08:40:00 purge tmpkg:all 1.0 <none>
2026-10-11 08:40:01 status not-installed tmpkg:all <none>
2026-10-12 07:00:00 install broken:amd64 <none> 0.9
2026-10-12 07:00:01 status half-installed broken:amd64 0.9
2026-10-12 07:05:00 upgrade halfconf:amd64 1.0 1.1
2026-10-12 07:05:01 status half-configured halfconf:amd64 1.1
2026-10-12 07:06:00 install same:amd64 2.0 2.0
2026-10-12 07:06:01 status installed same:amd64 2.0
not a dpkg line
"""

OPEN_WINDOW = TimeWindow(end=datetime(2026, 10, 31, 23, 59, 59))


def _write(tmp_path, name: str = "web1.dpkg.log"):
    path = tmp_path / name
    path.write_text(SAMPLE_LOG, encoding="utf-8")
    return path


def test_classifies_every_category(tmp_path) -> None:
    result = DpkgLogAnalyser().analyse(str(_write(tmp_path)), OPEN_WINDOW)

    assert result["newly_installed"] == {
        "nginx": PackageChange(name="nginx", version="1.18.0-6", previous_version="<none>", status="installed")
    }
    assert result["upgraded"]["libc6"].previous_version == "2.31-1"
    assert result["upgraded"]["libc6"].version == "2.31-2"
    assert result["removed"]["vim"].status == "config-files"
    assert result["removed"]["vim"].previous_version == "2:8.2-1"
    assert set(result["installed_and_removed"]) == {"tmpkg"}
    assert set(result["half_installed"]) == {"broken"}
    assert set(result["half_configured"]) == {"halfconf"}
    assert all("same" not in packages for packages in result.values())


def test_window_limits_the_lines_considered(tmp_path) -> None:
    window = TimeWindow(end=datetime(2026, 10, 11, 23, 59, 59), start=datetime(2026, 10, 11))

    result = DpkgLogAnalyser().analyse(str(_write(tmp_path)), window)

    assert set(result) == {"removed", "installed_and_removed"}


def test_reads_rotated_gzip_logs(tmp_path) -> None:
    path = tmp_path / "web1.dpkg.log.2.gz"
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write(SAMPLE_LOG)

    result = DpkgLogAnalyser().analyse(str(path), OPEN_WINDOW)

    assert set(result["newly_installed"]) == {"nginx"}


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(OSError):
        DpkgLogAnalyser().analyse(str(tmp_path / "absent.log"), OPEN_WINDOW)
