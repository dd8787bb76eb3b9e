"""Audio compilers - Extraction, volume and loudness normalization."""

from __future__ import annotations

from ..constants import AUDIO_FORMAT_CODECS
from ..plan import CompileContext, Plan
from ..validator import ValidatedArgs
from .base import format_number, single


def get_audio_codec(audio_format: str) -> str:
    """Map an audio container format to an encoder; unknown formats stream-copy."""
    return AUDIO_FORMAT_CODECS.get(audio_format.lower(), "copy")


def compile_extract_audio(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = [
        "-i",
        args["input"],
        "-vn",  # No video
        "-c:a",
        get_audio_codec(args["format"]),
        "-b:a",
        args["bitrate"],
        "-ar",
        args["sample_rate"],
        "-y",
        args["output"],
    ]
    return single(args, cmd)


def compile_adjust_volume(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    return single(args, ["-i", args["input"], "-af", f"volume={args['volume']}", "-y", args["output"]])


def compile_normalize_audio(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    if args.get("method") == "loudnorm":
        audio_filter = f"loudnorm=I={format_number(args['target_lufs'])}"
    else:
        audio_filter = "dynaudnorm"
    return single(args, ["-i", args["input"], "-af", audio_filter, "-y", args["output"]])
