"""
Dispatcher - Turns (operation name, raw arguments) into a response envelope.

Per-request state machine:

    Received -> Validating -> Compiling -> Invoking(1..n) -> Succeeded | Failed

- Received: catalog lookup, then the input-file pre-check
- Validating: structural validation and default substitution
- Compiling: pure plan construction
- Invoking(i): staged steps and external processes, strictly in order;
  a nonzero exit stops the plan
Temp artifacts are removed on every exit path. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .catalog import Catalog, OperationDescriptor
from .compilers import compile_plan
from .config import AppConfig
from .errors import (
    CompilationError,
    ErrorKind,
    FfmpegMcpError,
    InputNotFoundError,
    ValidationError,
)
from .invoker import ProcessInvoker, ProcessResult
from .operations import build_catalog
from .plan import CompileContext, Invocation, MoveFile, Plan, Tool, WriteFile
from .staging import relocate, temp_artifacts, write_manifest
from .tools import resolve_tool_paths
from .validator import ValidatedArgs, validate

logger = logging.getLogger(__name__)


class DispatchState(Enum):
    """Lifecycle of a single request."""

    RECEIVED = "received"
    VALIDATING = "validating"
    COMPILING = "compiling"
    INVOKING = "invoking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ResponseEnvelope:
    """Uniform result of one dispatch."""

    operation: str
    success: bool
    message: str
    # Raw stderr of the relevant invocation (tools report progress there even on success)
    diagnostics: str = ""
    error: ErrorKind | None = None
    # Set on invalid_arguments
    parameter: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire shape of the envelope."""
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "diagnostics": self.diagnostics,
        }
        if self.error is not None:
            data["error"] = self.error.value
        if self.parameter is not None:
            data["parameter"] = self.parameter
            data["reason"] = self.reason
        return data

    def render_text(self) -> str:
        """Human-readable text returned over the tool protocol."""
        if self.success:
            text = self.message
            if self.diagnostics:
                text = f"{text}\n\nOutput: {self.diagnostics}"
            return text

        text = f"Error executing {self.operation}: {self.message}"
        if self.diagnostics:
            text = f"{text}\n\n{self.diagnostics}"
        return text


def _new_token() -> str:
    return uuid.uuid4().hex[:12]


def format_report(summary: str | None, stdout: str) -> str:
    """Success message for plans that report their output, pretty-printing JSON."""
    try:
        body = json.dumps(json.loads(stdout), indent=2)
    except ValueError:
        body = stdout
    return f"{summary}\n{body}" if summary else body


class Dispatcher:
    """
    Validates, compiles and executes catalog operations.

    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        catalog: Catalog,
        tool_paths: Mapping[Tool, str] | None = None,
        invoker: ProcessInvoker | None = None,
        temp_dir: Path | None = None,
        path_exists: Callable[[str], bool] = os.path.exists,
        token_factory: Callable[[], str] = _new_token,
    ):
        """
        Initialize the dispatcher.

        Args:
            catalog: Read-only operation catalog
            tool_paths: Resolved executable per tool (defaults to bare names)
            invoker: Process invoker (defaults to one without timeout)
            temp_dir: Directory for temp artifacts (defaults to the system temp dir)
            path_exists: Existence check for the input pre-check
            token_factory: Source of per-request unique tokens
        """
        self.catalog = catalog
        self.tool_paths = {tool: tool.value for tool in Tool}
        if tool_paths:
            self.tool_paths.update(tool_paths)
        self.invoker = invoker or ProcessInvoker()
        self.temp_dir = temp_dir or Path(tempfile.gettempdir())
        self.path_exists = path_exists
        self.token_factory = token_factory

    @classmethod
    def from_config(cls, config: AppConfig, catalog: Catalog | None = None) -> Dispatcher:
        """Build a dispatcher with tool paths resolved once from config."""
        return cls(
            catalog=catalog or build_catalog(),
            tool_paths=resolve_tool_paths(config.tools),
            invoker=ProcessInvoker(timeout=config.tools.timeout),
            temp_dir=config.server.temp_dir,
        )

    def list_operations(self) -> list[OperationDescriptor]:
        """Descriptors for capability discovery, exactly as in the catalog."""
        return self.catalog.list()

    def executable(self, tool: Tool) -> str:
        return self.tool_paths[tool]

    def dispatch(self, name: str, raw: Mapping[str, Any] | None) -> ResponseEnvelope:
        """
        Run one operation end to end.

        Args:
            name: Operation name
            raw: Caller arguments as received from the transport

        Returns:
            ResponseEnvelope; failures never raise
        """
        self._enter(name, DispatchState.RECEIVED)
        try:
            descriptor = self.catalog.lookup(name)
            self.check_input(descriptor, raw)

            self._enter(name, DispatchState.VALIDATING)
            args = validate(descriptor, raw)

            self._enter(name, DispatchState.COMPILING)
            plan = self.compile(args)

            return self.execute(plan)
        except FfmpegMcpError as e:
            return self._failure(name, e)
        except Exception as e:
            logger.exception(f"Unexpected error in {name}")
            return self._failure(name, e)

    def check_input(self, descriptor: OperationDescriptor, raw: Mapping[str, Any] | None) -> None:
        """Fail early when the operation's primary input file is missing."""
        if not descriptor.declares("input") or not isinstance(raw, Mapping):
            return
        input_path = raw.get("input")
        if not isinstance(input_path, str):
            # Left to validation (missing_required / type_mismatch)
            return
        if not self.path_exists(input_path):
            raise InputNotFoundError(input_path)

    def compile(self, args: ValidatedArgs) -> Plan:
        """Compile with a fresh per-request context; any fault is internal."""
        context = CompileContext(token=self.token_factory(), temp_dir=self.temp_dir)
        try:
            return compile_plan(args, context)
        except FfmpegMcpError:
            raise
        except Exception as e:
            raise CompilationError(f"Failed to compile {args.operation}: {e}") from e

    def execute(self, plan: Plan) -> ResponseEnvelope:
        """Run plan steps in order; stop at the first nonzero exit."""
        last_result: ProcessResult | None = None
        last_invocation: Invocation | None = None
        index = 0

        with temp_artifacts(plan.temp_artifacts):
            for step in plan.steps:
                try:
                    if isinstance(step, WriteFile):
                        write_manifest(step.path, step.content)
                    elif isinstance(step, MoveFile):
                        relocate(step.source, step.destination)
                    else:
                        index += 1
                        self._enter(plan.operation, DispatchState.INVOKING, f"step {index}")
                        last_invocation = step
                        last_result = self.invoker.run(self.executable(step.tool), step.args, step.cwd)
                except FfmpegMcpError as e:
                    # Keep what earlier invocations reported
                    return self._failure(plan.operation, e, last_result.stderr if last_result else "")

                if isinstance(step, Invocation) and not last_result.exited_zero:
                    self._enter(plan.operation, DispatchState.FAILED, step.failure_message)
                    return ResponseEnvelope(
                        operation=plan.operation,
                        success=False,
                        message=step.failure_message,
                        diagnostics=last_result.stderr,
                        error=ErrorKind.EXTERNAL_TOOL_FAILURE,
                    )

        self._enter(plan.operation, DispatchState.SUCCEEDED)
        return ResponseEnvelope(
            operation=plan.operation,
            success=True,
            message=self._success_message(plan, last_invocation, last_result),
            diagnostics=last_result.stderr if last_result else "",
        )

    def _success_message(
        self, plan: Plan, invocation: Invocation | None, result: ProcessResult | None
    ) -> str:
        stdout = result.stdout if result else ""
        if plan.report_stdout:
            return format_report(plan.summary, stdout)
        if plan.summary:
            return f"{plan.summary}\n\n{stdout.strip()}" if stdout.strip() else plan.summary

        message = f"Successfully executed {plan.operation}"
        if invocation is not None:
            message = f"{message}\nCommand: {invocation.command_line(self.executable(invocation.tool))}"
        return message

    def _failure(self, name: str, error: Exception, diagnostics: str = "") -> ResponseEnvelope:
        kind = error.kind if isinstance(error, FfmpegMcpError) else ErrorKind.INTERNAL_FAULT
        self._enter(name, DispatchState.FAILED, kind.value)
        envelope = ResponseEnvelope(
            operation=name, success=False, message=str(error), diagnostics=diagnostics, error=kind
        )
        if isinstance(error, ValidationError):
            envelope.parameter = error.parameter
            envelope.reason = error.reason.value
        return envelope

    @staticmethod
    def _enter(name: str, state: DispatchState, detail: str = "") -> None:
        suffix = f" ({detail})" if detail else ""
        logger.debug(f"{name}: {state.value}{suffix}")
