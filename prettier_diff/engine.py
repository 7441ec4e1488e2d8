"""
Formatting engine — thin adapter over the Prettier CLI.

Every call is a blocking subprocess. Failures surface as ``FormatterError``
so callers can tell engine problems apart from marker problems.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class FormatterError(Exception):
    """Raised when the formatting engine fails or cannot be started."""


@dataclass
class FileInfo:
    """What the engine knows about a path before formatting it."""
    ignored: bool = False
    inferred_parser: Optional[str] = None


class FormattingEngine:
    """Interface the processors format through."""

    def format(
        self,
        text: str,
        filepath: str,
        config: Optional[str] = None,
        range_start: Optional[int] = None,
        range_end: Optional[int] = None,
    ) -> str:
        raise NotImplementedError

    def get_file_info(self, filepath: str) -> FileInfo:
        raise NotImplementedError

    def resolve_config(self, filepath: str) -> Optional[str]:
        raise NotImplementedError


class PrettierEngine(FormattingEngine):
    """Run Prettier through its command line interface.

    Parameters
    ----------
    command:
        How to invoke Prettier, e.g. ``"npx prettier"`` or a path to the
        ``prettier`` binary.
    """

    def __init__(self, command: str = "npx prettier") -> None:
        self._command = shlex.split(command)

    def _run(self, args: list[str], stdin: Optional[str] = None) -> str:
        cmd = self._command + args
        logger.debug("[Engine] Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise FormatterError(
                f"Could not start formatter '{' '.join(self._command)}': {exc}"
            ) from exc

        if result.returncode != 0:
            raise FormatterError(
                result.stderr.strip() or f"Formatter exited with {result.returncode}"
            )
        return result.stdout

    def format(
        self,
        text: str,
        filepath: str,
        config: Optional[str] = None,
        range_start: Optional[int] = None,
        range_end: Optional[int] = None,
    ) -> str:
        """Format *text* as if it were the contents of *filepath*.

        When both *range_start* and *range_end* are given, only that
        character span is requested to be reformatted.
        """
        args = ["--stdin-filepath", filepath]
        if config:
            args += ["--config", config]
        if range_start is not None and range_end is not None:
            args += [f"--range-start={range_start}", f"--range-end={range_end}"]
        return self._run(args, stdin=text)

    def get_file_info(self, filepath: str) -> FileInfo:
        output = self._run(["--file-info", filepath])
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise FormatterError(f"Unexpected --file-info output: {output!r}") from exc
        return FileInfo(
            ignored=bool(data.get("ignored", False)),
            inferred_parser=data.get("inferredParser"),
        )

    def resolve_config(self, filepath: str) -> Optional[str]:
        """Return the path of the config file that applies to *filepath*."""
        try:
            output = self._run(["--find-config-path", filepath])
        except FormatterError as exc:
            # Prettier exits non-zero when no config file exists.
            logger.debug("[Engine] No config for %s: %s", filepath, exc)
            return None
        return output.strip() or None
