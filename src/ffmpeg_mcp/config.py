"""
Configuration management with YAML loading and environment variable support.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import DEFAULT_EXECUTABLES, EXECUTABLE_ENV_VARS


def _env_str(env_var: str, default: str | None = None) -> str | None:
    """Get a string from an environment variable or return default."""
    if value := os.environ.get(env_var):
        return value
    return default


def _env_path(env_var: str, default: Path | None = None) -> Path | None:
    """Get path from environment variable or return default."""
    if value := os.environ.get(env_var):
        return Path(value)
    return default


@dataclass
class ToolsConfig:
    """External executables - each can be overridden via environment variables."""

    ffmpeg: str = DEFAULT_EXECUTABLES["ffmpeg"]
    ffprobe: str = DEFAULT_EXECUTABLES["ffprobe"]
    whisper: str = DEFAULT_EXECUTABLES["whisper"]
    # Seconds before an external process is killed (None = no limit)
    timeout: float | None = None

    def apply_env(self) -> None:
        """Environment overrides win over config file values."""
        for tool, env_var in EXECUTABLE_ENV_VARS.items():
            if value := os.environ.get(env_var):
                setattr(self, tool, value)


@dataclass
class ServerConfig:
    name: str = "ffmpeg-mcp"
    temp_dir: Path = field(default_factory=lambda: _env_path("FFMCP_TEMP_DIR", Path(tempfile.gettempdir())))


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: _env_str("FFMCP_LOG_LEVEL", "INFO"))
    file: Path | None = None
    console_logging: bool = True


@dataclass
class AppConfig:
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> AppConfig:
        """Load configuration from YAML file."""
        if not path.exists():
            return cls._from_dict({})

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> AppConfig:
        """Create config from dictionary."""
        config = cls()

        if "tools" in data:
            for key, value in (data["tools"] or {}).items():
                if hasattr(config.tools, key):
                    setattr(config.tools, key, str(value) if key in DEFAULT_EXECUTABLES else value)

        if "server" in data:
            for key, value in (data["server"] or {}).items():
                if hasattr(config.server, key):
                    setattr(config.server, key, Path(value) if key == "temp_dir" and value else value)

        if "logging" in data:
            for key, value in (data["logging"] or {}).items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, Path(value) if key == "file" and value else value)

        config.tools.apply_env()
        return config

    def _to_dict(self) -> dict:
        """Convert config to dictionary."""
        result = {}
        for attr in ["tools", "server", "logging"]:
            section = getattr(self, attr)
            result[attr] = {
                key: str(value) if isinstance(value, Path) else value for key, value in vars(section).items()
            }
        return result


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    # Check environment variable first
    if config_dir := os.environ.get("FFMCP_CONFIG_DIR"):
        return Path(config_dir)

    # Check XDG config home
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "ffmpeg-mcp"

    # Fall back to ~/.config
    return Path.home() / ".config" / "ffmpeg-mcp"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Path to config file (default: searches standard locations)
        config_dir: Config directory to search when no path is given

    Returns:
        AppConfig (defaults plus environment overrides when no file is found)
    """
    if config_dir is None:
        config_dir = _get_default_config_dir()

    if config_path is None:
        # Search for config in standard locations
        search_paths = [
            config_dir / "config.yaml",
            Path.cwd() / "ffmcp.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None:
        return AppConfig._from_dict({})
    return AppConfig.from_yaml(config_path)
