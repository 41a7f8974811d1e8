"""Tests for command routing and CLI output."""

from pathlib import Path

import pytest
import requests

from jvm.cli import first_command
from jvm.core.catalog import DEFAULT_CATALOG
from jvm.core.install_root import InstallRoot
from jvm.main import main as cli_main


@pytest.fixture
def use_session(monkeypatch):
    def _install(session) -> None:
        monkeypatch.setattr(requests, "Session", lambda: session)

    return _install


def _run(root: Path, *argv: str) -> int:
    return cli_main(["--root", str(root), *argv])


def test_no_command_prints_usage(capsys) -> None:
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "usage: jvm" in out
    assert "jvm: valid commands: list, install, use, uninstall" in out


def test_unknown_command_prints_usage(jvm_root: Path, capsys) -> None:
    code = _run(jvm_root, "frobnicate", "17")
    out = capsys.readouterr().out
    assert code == 1
    assert "jvm: unknown command: frobnicate" in out
    assert "valid commands" in out
    assert not jvm_root.exists()


def test_first_command_skips_option_values() -> None:
    assert first_command(["--root", "/somewhere", "-v", "install", "17"]) == "install"
    assert first_command(["--verbose"]) is None


def test_list_on_fresh_root(jvm_root: Path, capsys) -> None:
    code = _run(jvm_root, "list")
    assert code == 0
    assert capsys.readouterr().out.strip() == "jvm: no versions installed"
    assert not jvm_root.exists()


def test_install_use_and_list(jvm_root: Path, jdk_session, use_session, capsys) -> None:
    use_session(jdk_session)

    assert _run(jvm_root, "install", "17") == 0
    assert _run(jvm_root, "install", "8") == 0
    out = capsys.readouterr().out
    assert "jvm: Java 17 installed to" in out
    assert "100%" in out

    assert _run(jvm_root, "use", "17") == 0
    assert "jvm: now using Java 17" in capsys.readouterr().out

    assert _run(jvm_root, "list") == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["  open-jdk-8", "* open-jdk-17"]


def test_install_twice_reports_already_installed(jvm_root: Path, jdk_session, use_session, capsys) -> None:
    use_session(jdk_session)
    _run(jvm_root, "install", "latest")
    capsys.readouterr()

    code = _run(jvm_root, "install", "latest")

    assert code == 0
    assert "jvm: Java latest is already installed" in capsys.readouterr().out
    assert len(jdk_session.calls) == 1


def test_download_failure_is_fatal(jvm_root: Path, fake_session_cls, use_session, capsys) -> None:
    url = DEFAULT_CATALOG["17"]
    use_session(fake_session_cls({url: requests.exceptions.ConnectionError("unreachable")}))

    code = _run(jvm_root, "install", "17")

    captured = capsys.readouterr()
    assert code == 1
    assert "jvm: error: failed to download" in captured.err
    assert url in captured.err
    assert not (jvm_root / "installed-versions" / "open-jdk-17").exists()


@pytest.mark.parametrize("argv", [("install", "7"), ("install", "0"), ("use", "7"), ("uninstall", "7")])
def test_unsupported_version_is_informational(jvm_root: Path, argv, capsys) -> None:
    code = _run(jvm_root, *argv)
    assert code == 0
    assert "not supported" in capsys.readouterr().out
    assert not jvm_root.exists()


def test_unknown_version_is_informational(jvm_root: Path, capsys) -> None:
    code = _run(jvm_root, "install", "99")
    assert code == 0
    assert "jvm: unknown version specified: '99'" in capsys.readouterr().out
    assert not jvm_root.exists()


def test_use_not_installed(jvm_root: Path, capsys) -> None:
    code = _run(jvm_root, "use", "17")
    assert code == 0
    assert "jvm: Java 17 is not installed, run 'jvm install 17' first" in capsys.readouterr().out


def test_uninstall(jvm_root: Path, jdk_session, use_session, capsys) -> None:
    use_session(jdk_session)
    _run(jvm_root, "install", "11")
    capsys.readouterr()

    assert _run(jvm_root, "uninstall", "11") == 0
    assert "jvm: Java 11 uninstalled" in capsys.readouterr().out
    assert _run(jvm_root, "uninstall", "11") == 0
    assert "jvm: Java 11 is not installed" in capsys.readouterr().out


def test_locked_root_is_fatal(jvm_root: Path, jdk_session, use_session, capsys) -> None:
    use_session(jdk_session)

    with InstallRoot(jvm_root).lock():
        code = _run(jvm_root, "install", "17")

    assert code == 1
    assert "another jvm process" in capsys.readouterr().err


def test_root_from_environment(tmp_path: Path, monkeypatch, capsys) -> None:
    root = tmp_path / "env-root"
    (root / "installed-versions" / "open-jdk-19").mkdir(parents=True)
    monkeypatch.setenv("JVM_ROOT", str(root))

    assert cli_main(["list"]) == 0
    assert capsys.readouterr().out.splitlines() == ["  open-jdk-19"]


def test_missing_version_argument_is_usage_error(jvm_root: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(jvm_root, "install")
    assert excinfo.value.code == 2


def test_install_writes_log_file(jvm_root: Path, jdk_session, use_session, capsys) -> None:
    use_session(jdk_session)

    assert _run(jvm_root, "install", "17") == 0
    assert (jvm_root / "logs" / "jvm.log").is_file()


def test_root_that_is_a_file_is_fatal(tmp_path: Path, jdk_session, use_session, capsys) -> None:
    root = tmp_path / "not-a-dir"
    root.write_text("occupied")
    use_session(jdk_session)

    code = _run(root, "install", "17")

    assert code == 1
    assert "jvm: error:" in capsys.readouterr().err
    assert root.read_text() == "occupied"
