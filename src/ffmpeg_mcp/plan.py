"""
Invocation plans - What a compiled operation will do, as plain data.

A plan is an ordered list of steps:
- Invocation: run an external tool with an argument vector
- WriteFile: stage a temp file (e.g. a concat manifest) before an invocation
- MoveFile: relocate an output produced under a name we do not control

Plans are produced by the compilers without touching the filesystem and
executed step by step by the dispatcher.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .constants import TEMP_PREFIX


class Tool(Enum):
    """External executables an invocation can target."""

    FFMPEG = "ffmpeg"
    FFPROBE = "ffprobe"
    WHISPER = "whisper"


@dataclass(frozen=True)
class Invocation:
    """One external process run."""

    tool: Tool
    args: tuple[str, ...]
    cwd: Path | None = None
    # Prefix of the failure message when the process exits nonzero
    failure_message: str = "FFmpeg command failed"

    def command_line(self, executable: str | None = None) -> str:
        """Shell-quoted command line, for messages and logs."""
        return shlex.join([executable or self.tool.value, *self.args])


@dataclass(frozen=True)
class WriteFile:
    """Write a text file before the following invocations."""

    path: Path
    content: str


@dataclass(frozen=True)
class MoveFile:
    """Move a produced file to its final destination."""

    source: Path
    destination: Path


Step = Invocation | WriteFile | MoveFile


@dataclass
class Plan:
    """Ordered steps realizing one operation."""

    operation: str
    steps: list[Step] = field(default_factory=list)
    # Paths owned by the request, removed after the plan finishes
    temp_artifacts: list[Path] = field(default_factory=list)
    # Custom success message (defaults to the executed command line)
    summary: str | None = None
    # Success message is the summary followed by the last invocation's stdout
    # (pretty-printed when it is JSON)
    report_stdout: bool = False

    @property
    def invocations(self) -> list[Invocation]:
        return [s for s in self.steps if isinstance(s, Invocation)]


@dataclass(frozen=True)
class CompileContext:
    """
    Per-request inputs to compilation besides the arguments.

    The token is unique per request and appears in every temp artifact name,
    so concurrent identical requests never share a temp file.
    """

    token: str
    temp_dir: Path

    def temp_path(self, suffix: str, stem: str = "") -> Path:
        """Unique temp artifact path for this request."""
        name = f"{stem}-{TEMP_PREFIX}-{self.token}{suffix}" if stem else f"{TEMP_PREFIX}-{self.token}{suffix}"
        return self.temp_dir / name
