"""
FFmpeg MCP (ffmcp) - Media processing tools over a stdio tool protocol

Exposes ffmpeg, ffprobe and whisper operations as schema-validated tools:
- Declarative operation catalog with JSON-schema parameters
- Structural argument validation with default substitution
- Pure compilation of arguments into ffmpeg/whisper invocation plans
- Staged execution with temp-artifact cleanup and uniform responses
"""

__version__ = "0.1.0"
__package_name__ = "ffmpeg-mcp"
__short_name__ = "ffmcp"
