"""
Video compilers - Conversion, scaling, compression and per-frame filters.

Each function maps validated arguments to an invocation plan. Argument order
follows ffmpeg convention: input, then filters/codecs, then -y and output.
"""

from __future__ import annotations

from ..constants import DEFAULT_ROTATION, NULL_SINK, RESOLUTION_PRESETS, ROTATIONS
from ..plan import CompileContext, Plan
from ..validator import ValidatedArgs
from .base import ffmpeg, format_number, scale_expression, single


def compile_convert_format(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]

    if args.get("copy_streams"):
        # Stream copy: no codec selection at all
        cmd.extend(["-c", "copy"])
    else:
        video_codec = args.get("video_codec")
        if video_codec and video_codec != "auto":
            cmd.extend(["-c:v", video_codec])
        audio_codec = args.get("audio_codec")
        if audio_codec and audio_codec != "auto":
            cmd.extend(["-c:a", audio_codec])
        if args.get("quality"):
            cmd.extend(["-preset", args["quality"]])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def resolve_scale(preset: str | None, width: int | None, height: int | None) -> str | None:
    """
    Resolve the scale expression for resize_video.

    A known preset wins. An unknown or absent preset falls back to the
    explicit width/height (one missing dimension is auto-scaled).
    """
    if preset and preset in RESOLUTION_PRESETS:
        return RESOLUTION_PRESETS[preset]
    return scale_expression(width, height)


def compile_resize_video(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]

    scale = resolve_scale(args.get("preset"), args.get("width"), args.get("height"))
    if scale:
        algorithm = args.get("scaling_algorithm") or "lanczos"
        cmd.extend(["-vf", f"scale={scale}:flags={algorithm}"])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def _rate_control(args: ValidatedArgs) -> list[str]:
    """Codec, preset, CRF and optional bitrate shared by every compress pass."""
    cmd = ["-c:v", args.get("video_codec") or "libx265"]
    cmd.extend(["-preset", args["preset"]])
    cmd.extend(["-crf", str(args["crf"])])
    if args.get("video_bitrate"):
        cmd.extend(["-b:v", args["video_bitrate"]])
    return cmd


def compile_compress_video(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    """
    Compile compress_video, single or two-pass.

    Two-pass produces two invocations sharing a per-request pass log:
    - Pass 1: analysis only, output discarded to the null sink
    - Pass 2: final encode with audio
    Pass 2 is only issued if pass 1 exits zero.
    """
    audio = ["-c:a", "aac", "-b:a", args["audio_bitrate"]]

    if not args.get("two_pass"):
        cmd = ["-i", args["input"], *_rate_control(args), *audio, "-y", args["output"]]
        return single(args, cmd)

    passlog = ctx.temp_path("-passlog")
    first = ["-i", args["input"], *_rate_control(args)]
    first.extend(["-pass", "1", "-passlogfile", str(passlog)])
    first.extend(["-an", "-f", "null", "-y", NULL_SINK])

    second = ["-i", args["input"], *_rate_control(args)]
    second.extend(["-pass", "2", "-passlogfile", str(passlog)])
    second.extend([*audio, "-y", args["output"]])

    # Stats files written by libx264/libx265 next to the pass log prefix
    log_files = [passlog.with_name(f"{passlog.name}-0.log{ext}") for ext in ("", ".mbtree", ".temp", ".mbtree.temp")]

    return Plan(
        operation=args.operation,
        steps=[ffmpeg(first, "First pass failed"), ffmpeg(second, "Second pass failed")],
        temp_artifacts=log_files,
    )


def compile_change_framerate(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]
    rate = format_number(args["framerate"])

    if args.get("method") == "fps_filter":
        cmd.extend(["-vf", f"fps={rate}"])
    else:
        cmd.extend(["-r", rate])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def compile_rotate_video(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    transpose = ROTATIONS.get(args["rotation"], DEFAULT_ROTATION)
    return single(args, ["-i", args["input"], "-vf", transpose, "-y", args["output"]])


def compile_reverse_video(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"], "-vf", "reverse"]
    if args.get("reverse_audio"):
        cmd.extend(["-af", "areverse"])
    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def compile_create_gif(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = [
        "-i",
        args["input"],
        "-ss",
        args["start_time"],
        "-t",
        args["duration"],
        "-vf",
        f"scale={args['width']}:-1:flags=lanczos,fps={args['fps']}",
        "-y",
        args["output"],
    ]
    return single(args, cmd)


def compile_extract_frames(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]
    if args.get("start_time"):
        cmd.extend(["-ss", args["start_time"]])
    if args.get("duration"):
        cmd.extend(["-t", args["duration"]])
    cmd.extend(["-vf", f"fps={args['fps']}", "-y", args["output_pattern"]])
    return single(args, cmd)


def compile_apply_video_filter(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    """Filter text is passed through verbatim; its syntax is the caller's responsibility."""
    cmd = ["-i", args["input"]]
    if args.get("video_filter"):
        cmd.extend(["-vf", args["video_filter"]])
    if args.get("audio_filter"):
        cmd.extend(["-af", args["audio_filter"]])

    cmd.extend(["-c:v", args.get("video_codec") or "libx264"])
    cmd.extend(["-c:a", args.get("audio_codec") or "aac"])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def compile_create_thumbnail(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"], "-ss", args["time"], "-vframes", "1"]
    scale = scale_expression(args.get("width"), args.get("height"))
    if scale:
        cmd.extend(["-vf", f"scale={scale}"])
    cmd.extend(["-y", args["output"]])
    return single(args, cmd)
