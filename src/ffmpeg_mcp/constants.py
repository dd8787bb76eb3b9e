"""
Centralized constants for FFmpeg MCP.

Lookup tables shared by the compilers and names shared by config and tools
are defined here to avoid duplication across modules.
"""

import os

# Named resolution presets for resize_video (width:height)
RESOLUTION_PRESETS = {
    "360p": "640:360",
    "480p": "854:480",
    "720p": "1280:720",
    "1080p": "1920:1080",
    "4k": "3840:2160",
}

# Rotation codes to transpose filter chains
ROTATIONS = {
    "90": "transpose=1",
    "90_cw": "transpose=1",
    "90_ccw": "transpose=2",
    "180": "transpose=1,transpose=1",
    "270": "transpose=2",
}
DEFAULT_ROTATION = "transpose=1"

# Audio container format to encoder for extract_audio (anything else is stream-copied)
AUDIO_FORMAT_CODECS = {
    "mp3": "mp3",
    "aac": "aac",
    "wav": "pcm_s16le",
    "flac": "flac",
    "ogg": "libvorbis",
}

# Encoder speed presets (documentation hint for quality/preset parameters)
SPEED_PRESETS = ("ultrafast", "superfast", "veryfast", "faster", "fast", "medium", "slow", "slower", "veryslow")

# Whisper model sizes
WHISPER_MODELS = ("tiny", "base", "small", "medium", "large")

# Transcription input: mono 16 kHz PCM (whisper's native rate)
TRANSCRIBE_SAMPLE_RATE = "16000"
TRANSCRIBE_CHANNELS = "1"
TRANSCRIBE_CODEC = "pcm_s16le"

# Discarded output of the first pass of a two-pass encode
NULL_SINK = os.devnull

# Prefix of every temp artifact name
TEMP_PREFIX = "ffmcp"

# Executable names and their environment overrides
DEFAULT_EXECUTABLES = {
    "ffmpeg": "ffmpeg",
    "ffprobe": "ffprobe",
    "whisper": "whisper",
}
EXECUTABLE_ENV_VARS = {
    "ffmpeg": "FFMPEG_PATH",
    "ffprobe": "FFPROBE_PATH",
    "whisper": "WHISPER_PATH",
}
