"""
Transcription compiler - Subtitle generation with whisper.

Pipeline:
1. Extract mono 16 kHz PCM audio from the input into a temp WAV
2. Run whisper on the WAV, writing SRT into the output's directory
3. Move whisper's SRT (named after the WAV, not the caller) to the output path

The WAV and the intermediate SRT are temp artifacts of the request.
"""

from __future__ import annotations

from pathlib import Path

from ..constants import TRANSCRIBE_CHANNELS, TRANSCRIBE_CODEC, TRANSCRIBE_SAMPLE_RATE
from ..plan import CompileContext, Invocation, MoveFile, Plan, Tool
from ..validator import ValidatedArgs
from .base import ffmpeg


def compile_generate_subtitles(args: ValidatedArgs, ctx: CompileContext) -> Plan:
    input_path = Path(args["input"])
    output_path = Path(args["output"])
    output_dir = output_path.parent
    model = args.get("model") or "base"

    audio = ctx.temp_path(".wav", stem=input_path.stem)
    whisper_output = output_dir / f"{audio.stem}.srt"

    extract = ffmpeg(
        [
            "-i",
            str(input_path),
            "-vn",
            "-acodec",
            TRANSCRIBE_CODEC,
            "-ar",
            TRANSCRIBE_SAMPLE_RATE,
            "-ac",
            TRANSCRIBE_CHANNELS,
            "-y",
            str(audio),
        ],
        failure_message="Audio extraction failed",
    )

    whisper_args = [str(audio), "--model", model, "--output_format", "srt", "--output_dir", str(output_dir)]
    if args.get("language"):
        whisper_args.extend(["--language", args["language"]])
    transcribe = Invocation(
        tool=Tool.WHISPER,
        args=tuple(whisper_args),
        failure_message="Whisper transcription failed",
    )

    return Plan(
        operation=args.operation,
        steps=[extract, transcribe, MoveFile(source=whisper_output, destination=output_path)],
        temp_artifacts=[audio, whisper_output],
        summary=(
            "Successfully generated subtitles\n"
            f"Input: {args['input']}\n"
            f"Output: {args['output']}\n"
            f"Model: {model}"
        ),
    )
