"""Tests for the package-loader CLI."""

import pytest
from click.testing import CliRunner

from conftest import make_tree
from conftest import make_zip
from conftest import module_body
from package_loader.console import console
from package_loader.main import cli


@pytest.fixture
def isolated(tmp_path, monkeypatch, restore_logging):
    """Run with empty settings scopes and a wide console."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(console, "width", 200)
    return tmp_path


@pytest.fixture
def roots(isolated, init_log):
    root = make_tree(
        isolated / "root",
        {"p/__init__.py": "", "p/X.py": module_body(), "p/q/Y.py": module_body()},
    )
    archive = make_zip(isolated / "extra.zip", {"p/Z.py": module_body()})
    return str(root), str(archive)


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_help_without_command(isolated):
    result = invoke()
    assert result.exit_code == 0
    assert "locate" in result.output
    assert "load" in result.output


def test_locate(roots):
    root, archive = roots
    result = invoke("locate", "p", "--root", root, "--root", archive)
    assert result.exit_code == 0, result.output
    assert "directory" in result.output
    assert "archive" in result.output


def test_list_does_not_import(roots, init_log):
    root, archive = roots
    result = invoke("list", "p", "-r", root, "-r", archive)
    assert result.exit_code == 0, result.output
    for name in ("p.X", "p.q.Y", "p.Z"):
        assert name in result.output
    assert init_log.events == []


def test_list_shallow(roots):
    root, _ = roots
    result = invoke("list", "p", "-r", root, "--shallow")
    assert result.exit_code == 0, result.output
    assert "p.X" in result.output
    assert "p.q.Y" not in result.output


def test_load_initializes(roots, init_log):
    root, archive = roots
    result = invoke("load", "p", "-r", root, "-r", archive)
    assert result.exit_code == 0, result.output
    assert "3 module(s)" in result.output
    assert sorted(init_log.events) == ["p.X", "p.Z", "p.q.Y"]


def test_load_no_init(roots, init_log):
    root, _ = roots
    result = invoke("load", "p", "-r", root, "--no-init")
    assert result.exit_code == 0, result.output
    assert "resolved" in result.output
    assert "initialized" not in result.output
    assert init_log.events == []


def test_load_init_matching(roots, init_log):
    root, _ = roots
    result = invoke("load", "p", "-r", root, "--init-matching", "p.q.*")
    assert result.exit_code == 0, result.output
    assert init_log.events == ["p.q.Y"]


def test_load_flags_are_exclusive(roots):
    root, _ = roots
    result = invoke("load", "p", "-r", root, "--no-init", "--init-matching", "*")
    assert result.exit_code == 2
    assert "mutually exclusive" in result.output


def test_unknown_package_exits_with_error(roots):
    root, _ = roots
    result = invoke("load", "nope", "-r", root)
    assert result.exit_code == 1
    assert "not found" in result.output


def test_settings_roots_used_without_flag(roots, isolated, init_log):
    root, _ = roots
    settings = isolated / ".package-loader" / "settings.yaml"
    settings.parent.mkdir()
    settings.write_text(f"roots: ['{root}']\nrecursive: false\n", encoding="utf-8")

    result = invoke("load", "p")

    assert result.exit_code == 0, result.output
    assert init_log.events == ["p.X"]


def test_invalid_settings_exit_with_error(isolated):
    settings = isolated / ".package-loader" / "settings.yaml"
    settings.parent.mkdir()
    settings.write_text("entry_suffix: py\n", encoding="utf-8")

    result = invoke("list", "p")

    assert result.exit_code == 1
    assert "entry_suffix" in result.output
