"""Shared pytest fixtures for ffmpeg-mcp tests."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from ffmpeg_mcp.dispatcher import Dispatcher
from ffmpeg_mcp.invoker import ProcessResult
from ffmpeg_mcp.operations import build_catalog

TOKEN = "tok123"


class FakeInvoker:
    """
    Stand-in for ProcessInvoker that records calls instead of spawning.

    Results are consumed in order; once exhausted every run succeeds.
    `on_run` is called with (executable, args) before the result is returned,
    so tests can emulate files a tool would produce.
    """

    def __init__(self, results=None, on_run=None):
        self.results = list(results or [])
        self.on_run = on_run
        self.calls = []

    def run(self, executable, args, cwd=None):
        self.calls.append((executable, tuple(args)))
        if self.on_run:
            self.on_run(executable, tuple(args))
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return ProcessResult(stdout="", stderr="", returncode=0)


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def media_file(tmp_path):
    """Create a placeholder input media file."""
    video = tmp_path / "input.mp4"
    video.write_bytes(b"fake mp4 data")
    return video


@pytest.fixture
def work_dir(tmp_path):
    """Temp artifact directory for the dispatcher."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def dispatcher(catalog, fake_invoker, work_dir):
    """Dispatcher wired to the fake invoker with a fixed request token."""
    return Dispatcher(catalog, invoker=fake_invoker, temp_dir=work_dir, token_factory=lambda: TOKEN)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for tests that call external tools."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock_run


@pytest.fixture(name="_mock_shutil_which")
def mock_shutil_which():
    """Mock shutil.which to simulate available tools."""

    def which_side_effect(tool):
        available = {"ffmpeg", "ffprobe"}
        return f"/usr/bin/{tool}" if tool in available else None

    with patch("shutil.which", side_effect=which_side_effect) as mock:
        yield mock
