"""Static operation table - every operation the server advertises."""

from .catalog import Catalog, OperationDescriptor, ParameterSpec, ParamType, operation
from .constants import RESOLUTION_PRESETS, ROTATIONS, SPEED_PRESETS, WHISPER_MODELS

STRING = ParamType.STRING
INTEGER = ParamType.INTEGER
NUMBER = ParamType.NUMBER
BOOLEAN = ParamType.BOOLEAN
ARRAY = ParamType.ARRAY


def _input(description: str = "Input file path") -> ParameterSpec:
    return ParameterSpec("input", STRING, description)


def _output(description: str = "Output file path") -> ParameterSpec:
    return ParameterSpec("output", STRING, description)


OPERATIONS: tuple[OperationDescriptor, ...] = (
    operation(
        "convert_format",
        "Convert media files between different formats (MP4, AVI, MOV, WebM, MP3, WAV, etc.)",
        _input(),
        _output(),
        ParameterSpec("copy_streams", BOOLEAN, "Copy streams without re-encoding (faster, lossless)", False),
        ParameterSpec("video_codec", STRING, "Video codec (e.g., libx264, libx265, copy)", "auto"),
        ParameterSpec("audio_codec", STRING, "Audio codec (e.g., aac, mp3, copy)", "auto"),
        ParameterSpec("quality", STRING, "Encoder speed preset", "medium", choices=SPEED_PRESETS),
        required=("input", "output"),
    ),
    operation(
        "generate_subtitles",
        "Generate subtitle files from video audio using OpenAI Whisper",
        _input("Input video file path"),
        _output("Output subtitle file path (.srt)"),
        ParameterSpec("model", STRING, "Whisper model size", "base", choices=WHISPER_MODELS),
        ParameterSpec("language", STRING, "Language code (auto-detect if not specified)"),
        required=("input", "output"),
    ),
    operation(
        "extract_audio",
        "Extract audio from video files in various formats",
        _input("Input video file path"),
        _output("Output audio file path"),
        ParameterSpec("format", STRING, "Audio format", "mp3", choices=("mp3", "wav", "aac", "ogg", "flac")),
        ParameterSpec("bitrate", STRING, "Audio bitrate (e.g., 128k, 192k, 320k)", "192k"),
        ParameterSpec("sample_rate", STRING, "Sample rate (e.g., 44100, 48000)", "44100"),
        required=("input", "output"),
    ),
    operation(
        "resize_video",
        "Resize/scale video to different resolutions",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("width", INTEGER, "Output width in pixels"),
        ParameterSpec("height", INTEGER, "Output height in pixels"),
        ParameterSpec("preset", STRING, "Common resolution presets", choices=tuple(RESOLUTION_PRESETS)),
        ParameterSpec("maintain_aspect", BOOLEAN, "Maintain aspect ratio", True),
        ParameterSpec(
            "scaling_algorithm", STRING, "Scaling algorithm", "lanczos", choices=("lanczos", "bicubic", "bilinear")
        ),
        required=("input", "output"),
    ),
    operation(
        "compress_video",
        "Compress video files to reduce file size",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("crf", INTEGER, "Constant Rate Factor (0-51, lower = better quality, 23 is default)", 23),
        ParameterSpec("preset", STRING, "Encoding speed preset", "medium", choices=SPEED_PRESETS),
        ParameterSpec("video_bitrate", STRING, "Target video bitrate (e.g., 1000k, 2M)"),
        ParameterSpec("audio_bitrate", STRING, "Target audio bitrate (e.g., 128k, 192k)", "128k"),
        ParameterSpec("video_codec", STRING, "Video codec", "libx265", choices=("libx264", "libx265")),
        ParameterSpec("two_pass", BOOLEAN, "Use two-pass encoding for better quality", False),
        required=("input", "output"),
    ),
    operation(
        "trim_media",
        "Trim/cut media files to specific time ranges",
        _input(),
        _output(),
        ParameterSpec("start_time", STRING, "Start time (format: HH:MM:SS or seconds)", "00:00:00"),
        ParameterSpec("duration", STRING, "Duration to keep (format: HH:MM:SS or seconds)"),
        ParameterSpec("end_time", STRING, "End time (format: HH:MM:SS or seconds)"),
        ParameterSpec("copy_streams", BOOLEAN, "Copy streams without re-encoding (faster)", True),
        ParameterSpec("video_codec", STRING, "Video codec when not copying streams (libx264, libx265)"),
        ParameterSpec("audio_codec", STRING, "Audio codec when not copying streams (aac, mp3)"),
        required=("input", "output"),
    ),
    operation(
        "concatenate_videos",
        "Join multiple video files into one",
        ParameterSpec("inputs", ARRAY, "Array of input video file paths"),
        _output("Output video file path"),
        ParameterSpec(
            "method",
            STRING,
            "Concatenation method",
            "concat_demuxer",
            choices=("concat_demuxer", "concat_filter", "concat_protocol"),
        ),
        required=("inputs", "output"),
    ),
    operation(
        "add_subtitles",
        "Add subtitle files to videos",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("subtitle_file", STRING, "Subtitle file path (.srt, .ass, .vtt)"),
        ParameterSpec("embed", BOOLEAN, "Embed subtitles in video (true) or burn-in to video (false)", True),
        ParameterSpec("font_size", INTEGER, "Font size for burned-in subtitles", 24),
        ParameterSpec("font_color", STRING, "Font color for burned-in subtitles", "white"),
        required=("input", "output", "subtitle_file"),
    ),
    operation(
        "change_framerate",
        "Change video framerate",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("framerate", NUMBER, "Target framerate (e.g., 24, 30, 60)"),
        ParameterSpec(
            "method", STRING, "Framerate conversion method", "fps_filter", choices=("fps_filter", "r_flag")
        ),
        required=("input", "output", "framerate"),
    ),
    operation(
        "rotate_video",
        "Rotate video by specified degrees",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("rotation", STRING, "Rotation (90, 180, 270, or 90_ccw, 90_cw)", choices=tuple(ROTATIONS)),
        required=("input", "output", "rotation"),
    ),
    operation(
        "create_gif",
        "Convert video to animated GIF",
        _input("Input video file path"),
        _output("Output GIF file path"),
        ParameterSpec("start_time", STRING, "Start time (format: HH:MM:SS)", "00:00:00"),
        ParameterSpec("duration", STRING, "Duration (format: HH:MM:SS or seconds)", "5"),
        ParameterSpec("width", INTEGER, "Output width in pixels", 320),
        ParameterSpec("fps", INTEGER, "Frames per second", 10),
        required=("input", "output"),
    ),
    operation(
        "get_media_info",
        "Get detailed information about media files",
        _input(),
        ParameterSpec("show_format", BOOLEAN, "Show format information", True),
        ParameterSpec("show_streams", BOOLEAN, "Show stream information", True),
        required=("input",),
    ),
    operation(
        "extract_frames",
        "Extract frames from video as images",
        _input("Input video file path"),
        ParameterSpec("output_pattern", STRING, "Output filename pattern (e.g., frame_%04d.png)"),
        ParameterSpec("start_time", STRING, "Start time (format: HH:MM:SS)", "00:00:00"),
        ParameterSpec("duration", STRING, "Duration to extract frames from"),
        ParameterSpec("fps", STRING, "Extract one frame every N seconds (e.g., 1/60 for every 60 seconds)", "1"),
        required=("input", "output_pattern"),
    ),
    operation(
        "adjust_volume",
        "Adjust audio volume levels",
        _input(),
        _output(),
        ParameterSpec("volume", STRING, "Volume adjustment (e.g., 0.5 for half, 2.0 for double, +10dB, -5dB)"),
        required=("input", "output", "volume"),
    ),
    operation(
        "normalize_audio",
        "Normalize audio levels",
        _input(),
        _output(),
        ParameterSpec("method", STRING, "Normalization method", "loudnorm", choices=("loudnorm", "dynaudnorm")),
        ParameterSpec("target_lufs", NUMBER, "Target LUFS level for loudnorm", -23),
        required=("input", "output"),
    ),
    operation(
        "reverse_video",
        "Reverse video playback (play backwards)",
        _input("Input video file path"),
        _output("Output video file path"),
        ParameterSpec("reverse_audio", BOOLEAN, "Also reverse the audio track", True),
        required=("input", "output"),
    ),
    operation(
        "apply_video_filter",
        "Apply custom video and audio filters to media files",
        _input(),
        _output(),
        ParameterSpec("video_filter", STRING, "Video filter string (e.g., 'reverse', 'scale=640:480', 'blur=5')"),
        ParameterSpec("audio_filter", STRING, "Audio filter string (e.g., 'areverse', 'volume=0.5')"),
        ParameterSpec("video_codec", STRING, "Video codec (e.g., libx264, libx265)", "libx264"),
        ParameterSpec("audio_codec", STRING, "Audio codec (e.g., aac, mp3)", "aac"),
        required=("input", "output"),
    ),
    operation(
        "create_thumbnail",
        "Create thumbnail images from video",
        _input("Input video file path"),
        _output("Output image file path"),
        ParameterSpec("time", STRING, "Time to capture thumbnail (format: HH:MM:SS)", "00:00:01"),
        ParameterSpec("width", INTEGER, "Thumbnail width in pixels"),
        ParameterSpec("height", INTEGER, "Thumbnail height in pixels"),
        required=("input", "output"),
    ),
)


def build_catalog() -> Catalog:
    """Build the read-only catalog from the static table."""
    return Catalog(OPERATIONS)
