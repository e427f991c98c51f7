import os
import subprocess

from pretty_md_pdf.dependencies import DependencyChecker, check_dependencies, proxy_environment


def test_proxy_environment_sets_both_variables():
    env = proxy_environment({"proxy": "http://proxy:3128"}, base={"PATH": "/bin"})
    assert env == {"PATH": "/bin", "HTTPS_PROXY": "http://proxy:3128", "HTTP_PROXY": "http://proxy:3128"}


def test_proxy_environment_without_proxy():
    assert proxy_environment({"proxy": ""}, base={"PATH": "/bin"}) == {"PATH": "/bin"}


def test_configured_executable_is_used(tmp_path, logger):
    chrome = tmp_path / "chrome"
    chrome.write_text("", encoding="utf-8")
    assert DependencyChecker(logger).check_browser({"executablePath": str(chrome)}) is True


def test_bundled_browser_is_detected(tmp_path, logger, monkeypatch):
    chrome = tmp_path / "chrome"
    chrome.write_text("", encoding="utf-8")
    monkeypatch.setattr(DependencyChecker, "bundled_executable_path", lambda self: str(chrome))
    assert DependencyChecker(logger).check_browser({}) is True


def test_install_passes_proxy_to_installer_only(tmp_path, logger, monkeypatch):
    monkeypatch.delenv("HTTPS_PROXY", raising=False)
    monkeypatch.delenv("HTTP_PROXY", raising=False)
    chrome = tmp_path / "chrome"
    calls = []

    def fake_run(command, **kwargs):
        calls.append((command, kwargs))
        chrome.write_text("", encoding="utf-8")
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(DependencyChecker, "bundled_executable_path", lambda self: str(chrome))

    assert check_dependencies({"proxy": "http://proxy:3128"}, logger=logger) is True
    command, kwargs = calls[0]
    assert command[1:] == ["-m", "playwright", "install", "chromium"]
    assert kwargs["env"]["HTTPS_PROXY"] == "http://proxy:3128"
    assert kwargs["env"]["HTTP_PROXY"] == "http://proxy:3128"
    assert "HTTPS_PROXY" not in os.environ
    assert "HTTP_PROXY" not in os.environ


def test_failed_install_is_reported(tmp_path, logger, monkeypatch):
    def fake_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, stderr="network unreachable")

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(DependencyChecker, "bundled_executable_path", lambda self: str(tmp_path / "chrome"))
    assert check_dependencies({}, logger=logger) is False


def test_no_install_when_disabled(tmp_path, logger, monkeypatch):
    def fake_run(command, **kwargs):
        raise AssertionError("installer must not run")

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(DependencyChecker, "bundled_executable_path", lambda self: str(tmp_path / "chrome"))
    assert check_dependencies({}, install=False, logger=logger) is False
