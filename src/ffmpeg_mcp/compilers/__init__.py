"""
Compilers layer - Pure functions from validated arguments to invocation plans.

One compiler per catalog operation. Compilers never touch the filesystem or
spawn processes; staging and execution belong to the dispatcher.
"""

from ..errors import CompilationError
from ..plan import CompileContext, Plan
from ..validator import ValidatedArgs
from .audio import compile_adjust_volume, compile_extract_audio, compile_normalize_audio
from .base import Compiler
from .editing import compile_add_subtitles, compile_concatenate_videos, compile_trim_media
from .probe import compile_get_media_info
from .transcription import compile_generate_subtitles
from .video import (
    compile_apply_video_filter,
    compile_change_framerate,
    compile_compress_video,
    compile_convert_format,
    compile_create_gif,
    compile_create_thumbnail,
    compile_extract_frames,
    compile_resize_video,
    compile_reverse_video,
    compile_rotate_video,
)

COMPILERS: dict[str, Compiler] = {
    "convert_format": compile_convert_format,
    "generate_subtitles": compile_generate_subtitles,
    "extract_audio": compile_extract_audio,
    "resize_video": compile_resize_video,
    "compress_video": compile_compress_video,
    "trim_media": compile_trim_media,
    "concatenate_videos": compile_concatenate_videos,
    "add_subtitles": compile_add_subtitles,
    "change_framerate": compile_change_framerate,
    "rotate_video": compile_rotate_video,
    "create_gif": compile_create_gif,
    "get_media_info": compile_get_media_info,
    "extract_frames": compile_extract_frames,
    "adjust_volume": compile_adjust_volume,
    "normalize_audio": compile_normalize_audio,
    "reverse_video": compile_reverse_video,
    "apply_video_filter": compile_apply_video_filter,
    "create_thumbnail": compile_create_thumbnail,
}


def compile_plan(args: ValidatedArgs, context: CompileContext) -> Plan:
    """Compile validated arguments with the operation's compiler."""
    compiler = COMPILERS.get(args.operation)
    if compiler is None:
        raise CompilationError(f"No compiler registered for operation: {args.operation}")
    return compiler(args, context)


__all__ = [
    "COMPILERS",
    "Compiler",
    "compile_plan",
]
