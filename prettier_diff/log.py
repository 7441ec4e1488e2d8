"""
Run log — user-facing formatting status lines on top of ``logging``.

Every line is also kept as a ``LogEntry`` so a summary of warnings and
errors can be printed once all files are processed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from tqdm import tqdm

LOGGER_NAME = "prettier_diff"

LEVELS = ("info", "warn", "error")
_LEVEL_NUMBERS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

C_RESET = "\033[0m"
LEVEL_COLORS = {
    "info": "\033[34m",             # blue
    "warn": "\033[33m",             # yellow
    "error": "\033[31m",            # red
    "formatted": "\033[32m",        # green
    "skipped": "\033[36m",          # cyan
    "need formatting": "\033[35m",  # magenta
}


@dataclass
class LogEntry:
    level: str
    value: Any
    file: Optional[str] = None


class TqdmHandler(logging.Handler):
    """Console handler that writes around an active progress bar."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record))
        except Exception:
            self.handleError(record)


def setup_logger(
    log_dir: str | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure the package logger: console always, a file when *log_dir* is set."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = TqdmHandler()
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"prettier_diff_{timestamp}.log")

        # File handler — captures everything
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))
        logger.addHandler(fh)

    return logger


class FormatLog:
    """Status reporting for a formatting run.

    Parameters
    ----------
    logger:
        Where lines are emitted. Defaults to ``prettier_diff.run``.
    color:
        Wrap level tags in ANSI colours.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        color: bool = False,
    ) -> None:
        self._logger = logger or logging.getLogger(f"{LOGGER_NAME}.run")
        self.color = color
        self.entries: list[LogEntry] = []

    def _prefix(self, level: str) -> str:
        tag = f"[{level.upper()}]"
        if self.color:
            return f"{LEVEL_COLORS[level]}{tag}{C_RESET}"
        return tag

    def _emit(self, level: str, msg: Any, file: str | None) -> None:
        self.entries.append(LogEntry(level=level, value=msg, file=file))
        self._logger.log(
            _LEVEL_NUMBERS[level], "%s %s", self._prefix(level), _describe(msg)
        )
        if isinstance(msg, BaseException):
            # Tracebacks go to the file log, and to the console only with --verbose.
            self._logger.debug("Traceback for %s", _describe(msg), exc_info=msg)

    def info(self, msg: Any, file: str | None = None) -> None:
        self._emit("info", msg, file)

    def warn(self, msg: Any, file: str | None = None) -> None:
        self._emit("warn", msg, file)

    def error(self, msg: Any, file: str | None = None) -> None:
        self._emit("error", msg, file)

    def formatted(self, file: str, range: str | None = None) -> None:
        self.info(f"{self._prefix('formatted')} {file}{_range_suffix(range)}", file)

    def checked(self, file: str, range: str | None = None) -> None:
        self.warn(
            f"{self._prefix('need formatting')} {file}{_range_suffix(range)}", file
        )

    def skipped(self, file: str, reason: str) -> None:
        self.warn(f"{self._prefix('skipped')} {file} ({reason})", file)

    def summary_lines(self, level: str = "error") -> list[str]:
        """Lines for every entry at *level* or above."""
        threshold = LEVELS.index(level)
        lines: list[str] = []
        for entry in self.entries:
            if LEVELS.index(entry.level) < threshold:
                continue
            file_str = f" [{entry.file}]" if entry.file else ""
            lines.append(f"{self._prefix(entry.level)}{file_str} {_describe(entry.value)}")
        return lines

    def print_summary(self, level: str = "error") -> None:
        lines = self.summary_lines(level)
        if not lines:
            return
        print(f"\nLog summary (level: {level}):")
        for line in lines:
            print(line)

    def clear(self) -> None:
        self.entries.clear()


def _range_suffix(range: str | None) -> str:
    return f" [{range}]" if range else ""


def _describe(msg: Any) -> str:
    if isinstance(msg, BaseException):
        return str(msg) or type(msg).__name__
    return str(msg)


# Global run log
log = FormatLog()
