# A_core/A00_logging.py
"""
Logging setup for the label reconciliation pipeline.

Every module logs through ``get_logger(__name__)``, which places it under the
``label_recon`` namespace. The runner calls ``configure_logging`` once per run
to attach a console handler (coloured on a TTY) and, optionally, a rotating
per-run log file.

Helpers:
    LogContext  - logs begin/done/aborted for a phase with elapsed seconds
    StepLogger  - numbered "[i/N]" progress lines for the runner

Usage:
    from A_core.A00_logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(logger, "FDA label recency lookup"):
        recency = reconciler.lookup_recency(brands)
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional, Union

LOGGER_NAMESPACE = "label_recon"

DEFAULT_LOG_DIR = Path("logs")
CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

_RESET = "\033[0m"
_DIM = "\033[2m"
_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name when writing to a terminal."""

    def __init__(self, fmt: str = CONSOLE_FORMAT, datefmt: str = DATE_FORMAT, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Tint a copy; the file handler formats the same record
        tinted = logging.makeLogRecord(record.__dict__)
        color = _LEVEL_COLORS.get(record.levelno, _RESET)
        tinted.levelname = f"{color}{record.levelname}{_RESET}"
        tinted.name = f"{_DIM}{record.name}{_RESET}"
        return super().format(tinted)


class PipelineLogger:
    """
    Process-wide owner of the ``label_recon`` handlers.

    Reconfiguring replaces the handlers instead of adding to them, so a
    second run in the same process does not double every line.
    """

    _instance: Optional["PipelineLogger"] = None

    def __new__(cls) -> "PipelineLogger":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._run_id = None
            instance._log_file = None
            cls._instance = instance
        return cls._instance

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    @property
    def log_file(self) -> Optional[Path]:
        """Path of the current run's log file, if file logging is on."""
        return self._log_file

    def configure(
        self,
        log_dir: Optional[Union[str, Path]] = None,
        log_level: int = logging.INFO,
        run_id: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ) -> None:
        self._run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self._log_file = None

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        for handler in list(namespace.handlers):
            namespace.removeHandler(handler)
            handler.close()
        namespace.setLevel(log_level)

        if enable_console_logging:
            namespace.addHandler(self._console_handler(log_level))

        if enable_file_logging:
            directory = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
            directory.mkdir(parents=True, exist_ok=True)
            self._log_file = directory / f"reconciliation_{self._run_id}.log"
            namespace.addHandler(self._file_handler(self._log_file, log_level))

    @staticmethod
    def _console_handler(level: int) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(ColoredFormatter())
        return handler

    @staticmethod
    def _file_handler(path: Path, level: int) -> logging.Handler:
        handler = RotatingFileHandler(
            path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        return handler


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    log_level: int = logging.INFO,
    run_id: Optional[str] = None,
    enable_file_logging: bool = False,
    enable_console_logging: bool = True,
) -> None:
    """
    Attach the run's handlers. Call once from the runner.

    Args:
        log_dir: Directory for the rotating log file (default ``logs/``).
        log_level: Minimum level for both handlers.
        run_id: Suffix of the log file name; a timestamp when omitted.
        enable_file_logging: Write ``reconciliation_<run_id>.log``.
        enable_console_logging: Write to stdout.
    """
    PipelineLogger().configure(
        log_dir=log_dir,
        log_level=log_level,
        run_id=run_id,
        enable_file_logging=enable_file_logging,
        enable_console_logging=enable_console_logging,
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``label_recon`` namespace."""
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


@contextmanager
def LogContext(logger: logging.Logger, operation: str, level: int = logging.INFO) -> Iterator[None]:
    """
    Log the start and outcome of ``operation`` with its duration.

    Failures are logged at ERROR and re-raised unchanged.
    """
    started = time.perf_counter()
    logger.log(level, f"Starting: {operation}")
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation} after {time.perf_counter() - started:.2f}s "
            f"({type(e).__name__}: {e})"
        )
        raise
    logger.log(level, f"Completed: {operation} in {time.perf_counter() - started:.2f}s")


class StepLogger:
    """Numbered progress lines for the runner's fixed sequence of steps."""

    def __init__(self, logger: logging.Logger, total_steps: int):
        self.logger = logger
        self.total_steps = total_steps
        self.current_step = 0
        self._started: Optional[float] = None

    def step(self, description: str) -> "StepLogger":
        self.current_step += 1
        self._started = time.perf_counter()
        self.logger.info(f"[{self.current_step}/{self.total_steps}] {description}")
        return self

    def detail(self, message: str) -> None:
        self.logger.info(f"    {message}")

    def complete(self, summary: Optional[str] = None) -> float:
        """Close the current step; returns its elapsed seconds."""
        elapsed = time.perf_counter() - self._started if self._started is not None else 0.0
        if summary:
            self.detail(f"{summary} ({elapsed:.2f}s)")
        return elapsed
