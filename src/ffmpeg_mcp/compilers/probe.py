"""Probe compiler - Structured media inspection with ffprobe."""

from __future__ import annotations

from ..plan import CompileContext, Invocation, Plan, Tool
from ..validator import ValidatedArgs


def compile_get_media_info(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-v", "quiet", "-print_format", "json"]
    if args.get("show_format"):
        cmd.append("-show_format")
    if args.get("show_streams"):
        cmd.append("-show_streams")
    cmd.append(args["input"])

    return Plan(
        operation=args.operation,
        steps=[Invocation(tool=Tool.FFPROBE, args=tuple(cmd), failure_message="Failed to get media info")],
        summary="Media Information:",
        report_stdout=True,
    )
