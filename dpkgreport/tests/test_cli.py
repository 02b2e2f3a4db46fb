import json
from pathlib import Path

import pytest

from dpkgreport.cli import dpkg_report


def _log(package: str, version: str) -> str:
    return (
        f"2024-03-01 10:00:00 install {package}:amd64 <none> {version}\n"
        f"2024-03-01 10:00:01 status installed {package}:amd64 {version}\n"
        "2024-03-02 11:00:00 upgrade tzdata:all 2024a 2024b\n"
        "2024-03-02 11:00:01 status installed tzdata:all 2024b\n"
    )


def _write_fleet(tmp_path):
    logs = tmp_path / "logs"
    logs.mkdir()
    (logs / "web1.dpkg.log").write_text(_log("nginx", "1.18.0"), encoding="utf-8")
    (logs / "web2.dpkg.log").write_text(_log("nginx", "1.18.0"), encoding="utf-8")
    (logs / "db1.dpkg.log").write_text(_log("postgresql", "15"), encoding="utf-8")
    return logs


def test_merge_run_writes_every_report(tmp_path, capsys) -> None:
    logs = _write_fleet(tmp_path)
    out = tmp_path / "out"

    code = dpkg_report.main(
        ["--log-file", str(logs), "--merge", "--format", "markdown,json", "--out", str(out)]
    )

    assert code == 0
    names = sorted(path.name for path in out.iterdir())
    assert names == [
        "all.json",
        "all.md",
        "group-db.json",
        "group-db.md",
        "group-web.json",
        "group-web.md",
        "host-db1.json",
        "host-db1.md",
        "host-web1.json",
        "host-web1.md",
        "host-web2.json",
        "host-web2.md",
    ]
    common = json.loads((out / "all.json").read_text(encoding="utf-8"))
    assert [row["name"] for row in common["categories"]["upgraded"]] == ["tzdata"]
    web = json.loads((out / "group-web.json").read_text(encoding="utf-8"))
    assert [row["name"] for row in web["categories"]["newly_installed"]] == ["nginx"]
    assert json.loads((out / "host-web1.json").read_text(encoding="utf-8"))["no_data"] is True
    assert "Report run complete" in capsys.readouterr().err


def test_markdown_goes_to_stdout_without_out_dir(tmp_path, capsys) -> None:
    log = tmp_path / "dpkg.log"
    log.write_text(_log("nginx", "1.18.0"), encoding="utf-8")

    code = dpkg_report.main(["--hostname", "builder", "--log-file", str(log), "--merge", "false"])

    assert code == 0
    stdout = capsys.readouterr().out
    assert "# dpkg report: builder" in stdout
    assert "nginx | 1.18.0 | <none> | installed" in stdout


def test_unreadable_log_reports_no_data(tmp_path, capsys) -> None:
    code = dpkg_report.main(["--hostname", "ghost", "--log-file", str(tmp_path / "missing.log")])

    assert code == 0
    captured = capsys.readouterr()
    assert "No package changes." in captured.out
    assert "missing.log: FileNotFoundError" in captured.err


def test_unlistable_log_directory_reports_no_data(tmp_path, capsys, monkeypatch) -> None:
    logs = _write_fleet(tmp_path)

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", deny)

    code = dpkg_report.main(["--hostname", "ghost", "--log-file", str(logs)])

    assert code == 0
    captured = capsys.readouterr()
    assert "# dpkg report: ghost" in captured.out
    assert "No package changes." in captured.out
    assert f"No data from {logs}:" in captured.err


def test_settings_file_and_flag_override(tmp_path, capsys) -> None:
    logs = _write_fleet(tmp_path)
    settings = tmp_path / "settings.yaml"
    settings.write_text(
        f"log_files: [{logs}]\nmerge: true\nformats: json\nout_dir: {tmp_path / 'from-settings'}\n",
        encoding="utf-8",
    )
    out = tmp_path / "from-flag"

    code = dpkg_report.main(["--config", str(settings), "--out", str(out), "--merge", "no"])

    assert code == 0
    assert sorted(path.name for path in out.iterdir()) == ["host-db1.json", "host-web1.json", "host-web2.json"]


@pytest.mark.parametrize(
    "argv,expected",
    [
        (["--format", "docx"], "Unsupported format"),
        (["--format", "pdf"], "require an output directory"),
        (["--config", "settings.ini"], "Unsupported settings file extension"),
    ],
)
def test_invalid_input_exits_with_usage_code(tmp_path, capsys, argv, expected) -> None:
    if argv[0] == "--config":
        (tmp_path / "settings.ini").write_text("", encoding="utf-8")
        argv = ["--config", str(tmp_path / "settings.ini")]

    code = dpkg_report.main(argv)

    assert code == 2
    assert expected in capsys.readouterr().err


def test_emission_failure_exits_nonzero(tmp_path, capsys, monkeypatch) -> None:
    log = tmp_path / "web1.dpkg.log"
    log.write_text(_log("nginx", "1.18.0"), encoding="utf-8")

    def explode(self, report):
        raise OSError("disk full")

    monkeypatch.setattr(dpkg_report.MarkdownReportEmitter, "emit", explode)

    code = dpkg_report.main(["--log-file", str(log), "--out", str(tmp_path / "out")])

    assert code == 1
    assert "Failed to emit report web1: disk full" in capsys.readouterr().err


def test_window_flags_are_exclusive(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        dpkg_report.main(["--today", "--last-week"])

    assert exc.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err
