"""Tests for SystemRequirementsChecker."""

from extension_planner import ExtensionInfo
from extension_planner import SystemRequirementsChecker
from extension_planner import build_catalog


def fake_which(available: set[str]):
    def which(command: str) -> str | None:
        return f"/usr/bin/{command}" if command in available else None

    return which


def test_no_requirements_passes():
    catalog = build_catalog([ExtensionInfo(name="plain")])
    checker = SystemRequirementsChecker(catalog, python_version="3.12.1", which=fake_which(set()))

    assert checker.check_requirements("plain")
    assert checker.unmet_requirements("plain") == []


def test_python_version_requirement():
    """Test that the interpreter version is checked against the descriptor."""
    catalog = build_catalog([ExtensionInfo(name="modern", python=">=3.13"), ExtensionInfo(name="ok", python=">=3.11")])
    checker = SystemRequirementsChecker(catalog, python_version="3.12.1", which=fake_which(set()))

    assert not checker.check_requirements("modern")
    assert checker.check_requirements("ok")
    assert "requires Python >=3.13" in checker.unmet_requirements("modern")[0]


def test_missing_command():
    """Test that listed commands must be on PATH."""
    catalog = build_catalog([ExtensionInfo(name="vcs", commands=["git", "hg"])])
    checker = SystemRequirementsChecker(catalog, python_version="3.12.1", which=fake_which({"git"}))

    assert not checker.check_requirements("vcs")
    assert checker.unmet_requirements("vcs") == ["requires the 'hg' command"]


def test_unknown_extension_fails():
    checker = SystemRequirementsChecker({}, python_version="3.12.1")

    assert not checker.check_requirements("ghost")
