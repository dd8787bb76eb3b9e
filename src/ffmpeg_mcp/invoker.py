"""
Process invoker - Runs external tools and captures their output.

A nonzero exit is a normal result, not an exception: the caller inspects
``ProcessResult.exited_zero``. Only a failure to start the process at all
raises ``ToolStartError``.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import ToolStartError

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Captured outcome of one external process run."""

    stdout: str
    stderr: str
    returncode: int | None
    timed_out: bool = False

    @property
    def exited_zero(self) -> bool:
        return self.returncode == 0


class ProcessInvoker:
    """
    Runs executables with both output pipes drained concurrently.

    subprocess.run() reads stdout and stderr together via communicate(), so a
    child blocked on a full stderr pipe cannot deadlock against us.
    """

    def __init__(self, timeout: float | None = None):
        """
        Initialize the invoker.

        Args:
            timeout: Optional wall-clock limit in seconds; None runs to completion
        """
        self.timeout = timeout

    def run(self, executable: str, args: Sequence[str], cwd: Path | None = None) -> ProcessResult:
        """
        Run an executable and capture its output.

        Args:
            executable: Path or name of the program
            args: Argument vector (without the program itself)
            cwd: Optional working directory

        Returns:
            ProcessResult with captured stdout/stderr and exit status

        Raises:
            ToolStartError: if the process could not be started
        """
        cmd = [executable, *args]
        logger.debug(f"Running: {shlex.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"{executable} timed out after {self.timeout}s")
            return ProcessResult(
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr) + f"\nProcess timed out after {self.timeout}s",
                returncode=None,
                timed_out=True,
            )
        except OSError as e:
            raise ToolStartError(executable, e) from e

        logger.debug(f"{executable} exited with code {result.returncode}")
        return ProcessResult(stdout=result.stdout, stderr=result.stderr, returncode=result.returncode)


def _decode(data: str | bytes | None) -> str:
    # TimeoutExpired may carry bytes even when text=True
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data
