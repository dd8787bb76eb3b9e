"""Helpers shared by the per-operation compilers."""

from __future__ import annotations

from collections.abc import Callable

from ..plan import CompileContext, Invocation, Plan, Tool
from ..validator import ValidatedArgs

Compiler = Callable[[ValidatedArgs, CompileContext], Plan]


def format_number(value: int | float) -> str:
    """Render a number for ffmpeg, without a trailing .0 for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def scale_expression(width: int | None, height: int | None) -> str | None:
    """
    Build a width:height scale expression.

    A missing dimension becomes -1 so ffmpeg derives it from the aspect ratio.
    Returns None when neither dimension is given.
    """
    if width and height:
        return f"{width}:{height}"
    if width:
        return f"{width}:-1"
    if height:
        return f"-1:{height}"
    return None


def ffmpeg(args: list[str], failure_message: str = "FFmpeg command failed") -> Invocation:
    return Invocation(tool=Tool.FFMPEG, args=tuple(args), failure_message=failure_message)


def single(args: ValidatedArgs, cmd: list[str]) -> Plan:
    """Plan consisting of one ffmpeg invocation."""
    return Plan(operation=args.operation, steps=[ffmpeg(cmd)])
