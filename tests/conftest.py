"""Shared fixtures: real directory and zip roots built under tmp_path."""

import sys
import types
import zipfile
from pathlib import Path

import pytest

INIT_LOG = "package_loader_init_log"


def module_body(value: str = "ok") -> str:
    """Source for a fixture module that records its own initialization."""
    return f"import {INIT_LOG}\n{INIT_LOG}.events.append(__name__)\nVALUE = {value!r}\n"


def make_tree(root: Path, files: dict[str, str]) -> Path:
    """Write files (relative path -> source) below root and return root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def make_zip(path: Path, files: dict[str, str]) -> Path:
    """Write a zip archive with the given members and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for member, content in files.items():
            archive.writestr(member, content)
    return path


@pytest.fixture
def init_log(monkeypatch):
    """Module that fixture module bodies append their __name__ to when they run."""
    log = types.ModuleType(INIT_LOG)
    log.events = []
    monkeypatch.setitem(sys.modules, INIT_LOG, log)
    return log


@pytest.fixture
def restore_logging():
    """Restore root logger handlers and level after a test that configures logging."""
    import logging

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
