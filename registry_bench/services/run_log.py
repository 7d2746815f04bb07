"""Append-only run log: every line goes to a log file and to stdout."""

from __future__ import annotations

import logging
import sys
import traceback
import uuid
from pathlib import Path

from registry_bench.services.reports import file_timestamp

_RUN_LOGGER_PREFIX = "registry_bench.run"


class RunLog:
    """Wraps a non-propagating logger with a file and a stdout handler."""

    def __init__(self, path: Path, stream=None):
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(f"{_RUN_LOGGER_PREFIX}.{uuid.uuid4().hex}")
        self.logger.handlers = []
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        formatter = logging.Formatter("%(message)s")
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        stream_handler = logging.StreamHandler(stream or sys.stdout)
        stream_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)
        self.logger.addHandler(stream_handler)

    def line(self, message: str = "") -> None:
        self.logger.info(message)

    def error(self, exc: BaseException) -> None:
        self.logger.error("[ERROR] %s", exc)
        self.logger.error(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
        )

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                handler.close()
            self.logger.removeHandler(handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_run_log(log_dir: Path, kind: str, variant_value: str, stream=None) -> RunLog:
    """Open ``<log_dir>/<kind>-<variant>-<timestamp>.log``."""
    return RunLog(Path(log_dir) / f"{kind}-{variant_value}-{file_timestamp()}.log", stream=stream)


def stdout_log(name: str = "registry_bench.console", stream=None) -> logging.Logger:
    """Logger writing bare messages to stdout only (standalone benchmarks)."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


__all__ = ["RunLog", "open_run_log", "stdout_log"]
