import subprocess

from html_to_pdf import dependencies
from html_to_pdf.dependencies import DependencyChecker, chromium_install_command


def _fake_run(stdout, returncode=0):
    def run(*args, **kwargs):
        return subprocess.CompletedProcess(args[0], returncode, stdout=stdout, stderr="")
    return run


def test_chromium_found_at_install_location(monkeypatch, tmp_path):
    output = f"browser: chromium version 120.0\n  Install location:    {tmp_path}\n"
    monkeypatch.setattr(dependencies.subprocess, "run", _fake_run(output))

    status = DependencyChecker().check_chromium()

    assert status.available
    assert status.detail == str(tmp_path)


def test_chromium_missing_directory(monkeypatch, tmp_path):
    output = f"  Install location:    {tmp_path / 'chromium-0000'}\n"
    monkeypatch.setattr(dependencies.subprocess, "run", _fake_run(output))

    status = DependencyChecker().check_chromium()

    assert not status.available
    assert "playwright install" in status.hint


def test_playwright_cli_failure(monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("no such file")
    monkeypatch.setattr(dependencies.subprocess, "run", broken)

    assert not DependencyChecker().check_chromium().available


def test_missing_package():
    status = DependencyChecker().check_python_package("definitely-not-installed", "definitely_not_installed_pkg")
    assert not status.available
    assert status.hint == "pip install definitely-not-installed"


def test_install_command_adds_system_deps_on_linux():
    assert chromium_install_command("Linux").endswith("install --with-deps chromium")
    assert chromium_install_command("Darwin").endswith("install chromium")
