"""
Error taxonomy for FFmpeg MCP.

Every failure the dispatcher can report is an ``FfmpegMcpError`` subclass
carrying the ``ErrorKind`` it surfaces as. The dispatcher turns them into
failed response envelopes; nothing is retried.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    """Category of a failed dispatch, as reported to the caller."""

    UNKNOWN_OPERATION = "unknown_operation"
    INPUT_NOT_FOUND = "input_not_found"
    INVALID_ARGUMENTS = "invalid_arguments"
    EXTERNAL_TOOL_FAILURE = "external_tool_failure"
    INTERNAL_FAULT = "internal_fault"


class ValidationReason(Enum):
    """Why a parameter failed structural validation."""

    MISSING_REQUIRED = "missing_required"
    TYPE_MISMATCH = "type_mismatch"


class FfmpegMcpError(Exception):
    """Base class for all FFmpeg MCP errors."""

    kind = ErrorKind.INTERNAL_FAULT


class CatalogError(FfmpegMcpError):
    """An operation descriptor or the catalog itself is inconsistent."""


class UnknownOperationError(FfmpegMcpError):
    """The requested operation is not in the catalog."""

    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}")


class InputNotFoundError(FfmpegMcpError):
    """The primary input file does not exist."""

    kind = ErrorKind.INPUT_NOT_FOUND

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Input file does not exist: {path}")


class ValidationError(FfmpegMcpError):
    """A caller-supplied argument failed structural validation."""

    kind = ErrorKind.INVALID_ARGUMENTS

    def __init__(self, operation: str, parameter: str, reason: ValidationReason, detail: str = ""):
        self.operation = operation
        self.parameter = parameter
        self.reason = reason
        self.detail = detail
        message = f"Invalid argument '{parameter}' for {operation}: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CompilationError(FfmpegMcpError):
    """A validated argument record could not be compiled into a plan."""


class ToolStartError(FfmpegMcpError):
    """An external executable could not be started at all."""

    def __init__(self, executable: str, cause: OSError):
        self.executable = executable
        self.cause = cause
        super().__init__(f"Failed to start {executable}: {cause}")


class StagingError(FfmpegMcpError):
    """A temp artifact could not be written or an output could not be relocated."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)
