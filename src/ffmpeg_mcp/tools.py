"""
Tools module - Locate the external executables the operations drive.

Paths are resolved once at startup; a tool that cannot be found keeps its
configured name and fails at invocation time instead.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .config import ToolsConfig
from .plan import Tool


def resolve_tool_path(tool_name: str, config_path: str | None) -> Path | None:
    """
    Resolve tool path with smart fallback.

    Search order:
    1. Config/environment override (if it names an existing file)
    2. System PATH lookup of the override (bare names like "ffmpeg-6")
    3. System PATH lookup of the tool name

    Args:
        tool_name: Name of the tool to find
        config_path: Configured path or name (may be empty or None)

    Returns:
        Path to tool, or None if not found
    """
    if config_path:
        p = Path(config_path)
        if p.is_file():
            return p
        if found := shutil.which(config_path):
            return Path(found)

    sys_path = shutil.which(tool_name)
    if sys_path:
        return Path(sys_path)

    return None


def resolve_tool_paths(tools: ToolsConfig) -> dict[Tool, str]:
    """
    Resolve every tool to the executable string the invoker will run.

    Unresolvable tools keep their configured value.
    """
    paths = {}
    for tool in Tool:
        configured = getattr(tools, tool.value)
        resolved = resolve_tool_path(tool.value, configured)
        paths[tool] = str(resolved) if resolved else configured
    return paths


def check_tools_status(tools: ToolsConfig | None = None) -> dict[str, Path | None]:
    """
    Check status of all external tools.

    Returns:
        Dict mapping tool name to path (None if not found)
    """
    tools = tools or ToolsConfig()
    return {tool.value: resolve_tool_path(tool.value, getattr(tools, tool.value)) for tool in Tool}
