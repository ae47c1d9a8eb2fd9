"""
Logging bootstrap for the package-loader CLI.
Installs a console handler and, optionally, a JSONL file sink.
"""

import json
import logging
import os
import sys
from datetime import UTC
from datetime import datetime
from pathlib import Path

DEFAULT_PATH = os.environ.get("PACKAGE_LOADER_LOG_PATH")
DEFAULT_LEVEL = os.environ.get("PACKAGE_LOADER_LOG_LEVEL", "WARNING").upper()

# Standard LogRecord attributes; anything else on a record is an extra field
_RECORD_FIELDS = frozenset(
    (
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        base = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "package_loader.log", "ver": "1.0.0"},
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            base["exc"] = logging.Formatter().formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k in _RECORD_FIELDS:
                continue
            base.setdefault(k, v)
        return base

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def _replace_handler(root: logging.Logger, handler: logging.Handler) -> None:
    # Remove existing handlers of the same kind to avoid duplicates
    for h in list(root.handlers):
        if type(h) is type(handler):
            root.removeHandler(h)
    root.addHandler(handler)


def init_json_logging(path: str | None = None, level: str | None = None) -> JsonlHandler | None:
    """Attach a JSONL sink to the root logger. No-op when no path is configured."""
    path = path or DEFAULT_PATH
    if not path:
        return None
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.WARNING))
    handler = JsonlHandler(path)
    _replace_handler(root, handler)
    return handler


def init_console_logging(level: str | None = None) -> None:
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.WARNING))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    _replace_handler(root, handler)
