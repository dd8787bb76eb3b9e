"""
Editing compilers - Trimming, concatenation and subtitle tracks.

Concatenation strategies:
- concat_demuxer: ordered manifest file, stream copy (inputs must share codecs)
- concat_protocol: single "concat:a|b" path expression, stream copy
- concat_filter: filter graph re-encode (inputs may differ)
"""

from __future__ import annotations

from ..plan import CompileContext, Plan, WriteFile
from ..validator import ValidatedArgs
from .base import ffmpeg, single


def compile_trim_media(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]

    if args.get("start_time"):
        cmd.extend(["-ss", args["start_time"]])

    # Duration takes precedence over end time
    if args.get("duration"):
        cmd.extend(["-t", args["duration"]])
    elif args.get("end_time"):
        cmd.extend(["-to", args["end_time"]])

    if args.get("copy_streams"):
        cmd.extend(["-c", "copy"])
    else:
        if args.get("video_codec"):
            cmd.extend(["-c:v", args["video_codec"]])
        if args.get("audio_codec"):
            cmd.extend(["-c:a", args["audio_codec"]])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)


def _quote_manifest_path(path: str) -> str:
    # concat demuxer syntax: close the quote, escaped quote, reopen
    return path.replace("'", "'\\''")


def build_concat_manifest(inputs: list[str]) -> str:
    """
    Build a concat demuxer manifest.

    One line per input, in input order:
        file '/videos/a.mp4'
        file '/videos/b.mp4'
    """
    return "".join(f"file '{_quote_manifest_path(path)}'\n" for path in inputs)


def build_concat_filter(count: int) -> str:
    """Filter graph joining `count` inputs with one video and one audio stream each."""
    pads = "".join(f"[{i}:v][{i}:a]" for i in range(count))
    return f"{pads}concat=n={count}:v=1:a=1[v][a]"


def compile_concatenate_videos(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    inputs: list[str] = args["inputs"]
    method = args.get("method")

    if method == "concat_demuxer":
        manifest = ctx.temp_path("-concat.txt")
        cmd = ["-f", "concat", "-safe", "0", "-i", str(manifest), "-c", "copy", "-y", args["output"]]
        return Plan(
            operation=args.operation,
            steps=[WriteFile(path=manifest, content=build_concat_manifest(inputs)), ffmpeg(cmd)],
            temp_artifacts=[manifest],
        )

    if method == "concat_filter":
        cmd = []
        for path in inputs:
            cmd.extend(["-i", path])
        cmd.extend(["-filter_complex", build_concat_filter(len(inputs))])
        cmd.extend(["-map", "[v]", "-map", "[a]", "-y", args["output"]])
        return single(args, cmd)

    # concat_protocol and anything unrecognized
    return single(args, ["-i", f"concat:{'|'.join(inputs)}", "-c", "copy", "-y", args["output"]])


def compile_add_subtitles(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    cmd = ["-i", args["input"]]

    if args.get("embed"):
        # Soft subtitles as an extra stream
        cmd.extend(["-i", args["subtitle_file"], "-c", "copy", "-c:s", "mov_text"])
    else:
        # Burn-in; style text is passed through verbatim
        style = f"FontSize={args['font_size']},PrimaryColour={args['font_color']}"
        cmd.extend(["-vf", f"subtitles={args['subtitle_file']}:force_style='{style}'"])

    cmd.extend(["-y", args["output"]])
    return single(args, cmd)
