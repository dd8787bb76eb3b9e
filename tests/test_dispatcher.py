"""Tests for the dispatcher state machine and response envelopes."""

import json
from pathlib import Path

from conftest import TOKEN, FakeInvoker

from ffmpeg_mcp.config import AppConfig
from ffmpeg_mcp.dispatcher import Dispatcher, ResponseEnvelope, format_report
from ffmpeg_mcp.errors import ErrorKind, ToolStartError
from ffmpeg_mcp.invoker import ProcessResult
from ffmpeg_mcp.plan import Tool
from ffmpeg_mcp.validator import validate


def ok(stdout="", stderr=""):
    return ProcessResult(stdout=stdout, stderr=stderr, returncode=0)


def failed(stderr="", returncode=1):
    return ProcessResult(stdout="", stderr=stderr, returncode=returncode)


class TestResponseEnvelope:
    """Tests for envelope rendering."""

    def test_success_text(self):
        """Test success text with diagnostics."""
        envelope = ResponseEnvelope("trim_media", True, "Successfully executed trim_media", "frame=10")
        assert envelope.render_text() == "Successfully executed trim_media\n\nOutput: frame=10"

    def test_success_text_no_diagnostics(self):
        envelope = ResponseEnvelope("trim_media", True, "done")
        assert envelope.render_text() == "done"

    def test_failure_text(self):
        """Test failure text names the operation."""
        envelope = ResponseEnvelope(
            "trim_media", False, "FFmpeg command failed", "No such file", ErrorKind.EXTERNAL_TOOL_FAILURE
        )
        assert envelope.render_text() == "Error executing trim_media: FFmpeg command failed\n\nNo such file"

    def test_to_dict(self):
        """Test wire shape includes error fields only on failure."""
        assert ResponseEnvelope("op", True, "ok").to_dict() == {"success": True, "message": "ok", "diagnostics": ""}

        envelope = ResponseEnvelope(
            "op", False, "bad", error=ErrorKind.INVALID_ARGUMENTS, parameter="crf", reason="type_mismatch"
        )
        data = envelope.to_dict()
        assert data["error"] == "invalid_arguments"
        assert data["parameter"] == "crf"
        assert data["reason"] == "type_mismatch"

    def test_format_report_json(self):
        """Test JSON stdout is pretty-printed under the summary."""
        assert format_report("Media Information:", '{"a":1}') == 'Media Information:\n{\n  "a": 1\n}'

    def test_format_report_text(self):
        assert format_report(None, "plain") == "plain"


class TestDispatchFailures:
    """Tests for each error category."""

    def test_unknown_operation(self, dispatcher, fake_invoker):
        """Test unknown operations never reach an invocation."""
        envelope = dispatcher.dispatch("explode_video", {"input": "a.mp4"})
        assert not envelope.success
        assert envelope.error == ErrorKind.UNKNOWN_OPERATION
        assert "explode_video" in envelope.message
        assert fake_invoker.calls == []

    def test_input_not_found(self, dispatcher, fake_invoker, tmp_path):
        """Test a missing input file fails before any invocation."""
        missing = tmp_path / "missing.mp4"
        envelope = dispatcher.dispatch("get_media_info", {"input": str(missing)})
        assert envelope.error == ErrorKind.INPUT_NOT_FOUND
        assert str(missing) in envelope.message
        assert fake_invoker.calls == []

    def test_input_checked_before_validation(self, dispatcher, tmp_path):
        """Test the input check runs even when other arguments are invalid."""
        envelope = dispatcher.dispatch("adjust_volume", {"input": str(tmp_path / "missing.mp4")})
        assert envelope.error == ErrorKind.INPUT_NOT_FOUND

    def test_non_string_input_is_type_mismatch(self, dispatcher, fake_invoker):
        """Test a non-string input is left to validation, not the file check."""
        envelope = dispatcher.dispatch("get_media_info", {"input": ["a.mp4"]})
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "input"
        assert envelope.reason == "type_mismatch"
        assert fake_invoker.calls == []

    def test_non_finite_number_rejected(self, dispatcher, fake_invoker, media_file):
        envelope = dispatcher.dispatch(
            "change_framerate", {"input": str(media_file), "output": "b.mp4", "framerate": "nan"}
        )
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "framerate"
        assert fake_invoker.calls == []

    def test_missing_input_is_validation_error(self, dispatcher):
        """Test an absent input parameter is reported by validation."""
        envelope = dispatcher.dispatch("convert_format", {"output": "b.mp4"})
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "input"
        assert envelope.reason == "missing_required"

    def test_missing_required(self, dispatcher, fake_invoker, media_file):
        """Test missing required parameters name the parameter."""
        envelope = dispatcher.dispatch("adjust_volume", {"input": str(media_file), "output": "b.mp4"})
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "volume"
        assert envelope.reason == "missing_required"
        assert fake_invoker.calls == []

    def test_type_mismatch(self, dispatcher, media_file):
        envelope = dispatcher.dispatch("compress_video", {"input": str(media_file), "output": "b.mp4", "crf": "best"})
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "crf"
        assert envelope.reason == "type_mismatch"

    def test_non_object_arguments(self, dispatcher):
        envelope = dispatcher.dispatch("get_media_info", "a.mp4")
        assert envelope.error == ErrorKind.INVALID_ARGUMENTS
        assert envelope.parameter == "arguments"

    def test_tool_failure(self, dispatcher, fake_invoker, media_file):
        """Test a nonzero exit becomes external_tool_failure with stderr."""
        fake_invoker.results = [failed("Invalid data found when processing input")]
        envelope = dispatcher.dispatch("reverse_video", {"input": str(media_file), "output": "b.mp4"})
        assert envelope.error == ErrorKind.EXTERNAL_TOOL_FAILURE
        assert envelope.message == "FFmpeg command failed"
        assert envelope.diagnostics == "Invalid data found when processing input"

    def test_tool_start_failure(self, dispatcher, fake_invoker, media_file):
        """Test an executable that cannot start is an internal fault."""
        fake_invoker.results = [ToolStartError("ffmpeg", FileNotFoundError("No such file"))]
        envelope = dispatcher.dispatch("reverse_video", {"input": str(media_file), "output": "b.mp4"})
        assert envelope.error == ErrorKind.INTERNAL_FAULT
        assert "Failed to start ffmpeg" in envelope.message

    def test_unexpected_exception(self, dispatcher, fake_invoker, media_file):
        """Test unexpected errors are contained in the envelope."""
        fake_invoker.results = [RuntimeError("boom")]
        envelope = dispatcher.dispatch("reverse_video", {"input": str(media_file), "output": "b.mp4"})
        assert not envelope.success
        assert envelope.error == ErrorKind.INTERNAL_FAULT
        assert "boom" in envelope.message


class TestDispatchSuccess:
    """Tests for successful dispatches."""

    def test_single_invocation(self, dispatcher, fake_invoker, media_file):
        """Test success message carries the command line and stderr."""
        fake_invoker.results = [ok(stderr="size=100kB")]
        envelope = dispatcher.dispatch(
            "trim_media", {"input": str(media_file), "output": "c.mp4", "start_time": "00:01:00", "duration": "30"}
        )
        assert envelope.success
        assert envelope.error is None
        assert envelope.message.startswith("Successfully executed trim_media\nCommand: ffmpeg -i ")
        assert "-ss 00:01:00 -t 30 -c copy -y c.mp4" in envelope.message
        assert envelope.diagnostics == "size=100kB"
        assert fake_invoker.calls == [
            ("ffmpeg", ("-i", str(media_file), "-ss", "00:01:00", "-t", "30", "-c", "copy", "-y", "c.mp4"))
        ]

    def test_resize_preset(self, dispatcher, fake_invoker, media_file):
        """Test a 720p resize runs one scale invocation and succeeds."""
        envelope = dispatcher.dispatch("resize_video", {"input": str(media_file), "output": "b.mp4", "preset": "720p"})
        assert envelope.success
        assert "scale=1280:720:flags=lanczos" in fake_invoker.calls[0][1]

    def test_configured_executable(self, catalog, fake_invoker, media_file, work_dir):
        """Test invocations use the resolved tool path."""
        dispatcher = Dispatcher(
            catalog, tool_paths={Tool.FFMPEG: "/opt/ffmpeg/bin/ffmpeg"}, invoker=fake_invoker, temp_dir=work_dir
        )
        dispatcher.dispatch("reverse_video", {"input": str(media_file), "output": "b.mp4"})
        assert fake_invoker.calls[0][0] == "/opt/ffmpeg/bin/ffmpeg"
        assert dispatcher.executable(Tool.FFPROBE) == "ffprobe"

    def test_media_info(self, dispatcher, fake_invoker, media_file):
        """Test ffprobe output is reported as pretty JSON."""
        probe = {"format": {"duration": "10.0"}, "streams": []}
        fake_invoker.results = [ok(stdout=json.dumps(probe))]
        envelope = dispatcher.dispatch("get_media_info", {"input": str(media_file)})
        assert envelope.success
        assert envelope.message.startswith("Media Information:\n")
        assert json.loads(envelope.message.split("\n", 1)[1]) == probe
        assert fake_invoker.calls[0][0] == "ffprobe"

    def test_concatenate_has_no_input_check(self, dispatcher, fake_invoker):
        """Test operations without `input` skip the pre-check."""
        raw = {"inputs": ["a.ts", "b.ts"], "output": "o.ts", "method": "concat_protocol"}
        envelope = dispatcher.dispatch("concatenate_videos", raw)
        assert envelope.success
        assert len(fake_invoker.calls) == 1

    def test_list_operations(self, dispatcher, catalog):
        assert dispatcher.list_operations() == catalog.list()


class TestTwoPass:
    """Tests for two-pass compression sequencing."""

    RAW = {"output": "d.mp4", "two_pass": True}

    def test_both_passes_run(self, dispatcher, fake_invoker, media_file):
        envelope = dispatcher.dispatch("compress_video", {"input": str(media_file), **self.RAW})
        assert envelope.success
        assert len(fake_invoker.calls) == 2
        assert "-pass" in fake_invoker.calls[0][1]
        assert fake_invoker.calls[0][1][fake_invoker.calls[0][1].index("-pass") + 1] == "1"
        assert fake_invoker.calls[1][1][fake_invoker.calls[1][1].index("-pass") + 1] == "2"

    def test_first_pass_failure_stops(self, dispatcher, fake_invoker, media_file):
        """Test pass 2 is never issued when pass 1 fails."""
        fake_invoker.results = [failed("x265 [error]: bad crf")]
        envelope = dispatcher.dispatch("compress_video", {"input": str(media_file), **self.RAW})
        assert len(fake_invoker.calls) == 1
        assert envelope.error == ErrorKind.EXTERNAL_TOOL_FAILURE
        assert envelope.message == "First pass failed"
        assert envelope.diagnostics == "x265 [error]: bad crf"

    def test_second_pass_failure(self, dispatcher, fake_invoker, media_file):
        fake_invoker.results = [ok(), failed("disk full")]
        envelope = dispatcher.dispatch("compress_video", {"input": str(media_file), **self.RAW})
        assert envelope.message == "Second pass failed"
        assert envelope.diagnostics == "disk full"

    def test_pass_logs_removed(self, dispatcher, fake_invoker, media_file, work_dir):
        """Test pass log stats files are removed after the encode."""

        def write_log(executable, args):
            passlog = args[args.index("-passlogfile") + 1]
            Path(f"{passlog}-0.log").write_text("stats")
            Path(f"{passlog}-0.log.mbtree").write_text("tree")

        fake_invoker.on_run = write_log
        dispatcher.dispatch("compress_video", {"input": str(media_file), **self.RAW})
        assert list(work_dir.iterdir()) == []


class TestConcatManifest:
    """Tests for the staged concat manifest."""

    def test_manifest_written_then_removed(self, dispatcher, fake_invoker, work_dir):
        """Test the manifest exists during the invocation and not after."""
        seen = {}

        def read_manifest(executable, args):
            manifest = Path(args[args.index("-i") + 1])
            seen["path"] = manifest
            seen["content"] = manifest.read_text()

        fake_invoker.on_run = read_manifest
        envelope = dispatcher.dispatch("concatenate_videos", {"inputs": ["/v/a.mp4", "/v/b.mp4"], "output": "o.mp4"})

        assert envelope.success
        assert seen["path"] == work_dir / f"ffmcp-{TOKEN}-concat.txt"
        assert seen["content"] == "file '/v/a.mp4'\nfile '/v/b.mp4'\n"
        assert not seen["path"].exists()

    def test_manifest_removed_on_failure(self, dispatcher, fake_invoker, work_dir):
        fake_invoker.results = [failed("Unsafe file name")]
        envelope = dispatcher.dispatch("concatenate_videos", {"inputs": ["a.mp4"], "output": "o.mp4"})
        assert envelope.error == ErrorKind.EXTERNAL_TOOL_FAILURE
        assert list(work_dir.iterdir()) == []

    def test_concurrent_requests_use_distinct_manifests(self, catalog, work_dir):
        """Test default tokens differ between requests."""
        dispatcher = Dispatcher(catalog, invoker=FakeInvoker(), temp_dir=work_dir)
        descriptor = catalog["concatenate_videos"]
        args = validate(descriptor, {"inputs": ["a.mp4"], "output": "o.mp4"})
        first = dispatcher.compile(args)
        second = dispatcher.compile(args)
        assert first.temp_artifacts != second.temp_artifacts


class TestGenerateSubtitles:
    """Tests for the transcription pipeline."""

    def test_pipeline(self, dispatcher, fake_invoker, media_file, tmp_path, work_dir):
        """Test whisper's output is moved to the requested path and temps removed."""
        output = tmp_path / "subs" / "talk.srt"
        output.parent.mkdir()

        def emulate(executable, args):
            if executable == "ffmpeg":
                Path(args[-1]).write_bytes(b"RIFF")
            else:
                wav = Path(args[0])
                out_dir = Path(args[args.index("--output_dir") + 1])
                (out_dir / f"{wav.stem}.srt").write_text("1\n00:00:00,000 --> 00:00:01,000\nHello\n")

        fake_invoker.on_run = emulate
        envelope = dispatcher.dispatch("generate_subtitles", {"input": str(media_file), "output": str(output)})

        assert envelope.success, envelope.message
        assert "Hello" in output.read_text()
        assert [c[0] for c in fake_invoker.calls] == ["ffmpeg", "whisper"]
        assert envelope.message.startswith("Successfully generated subtitles")
        assert list(work_dir.iterdir()) == []
        assert sorted(p.name for p in output.parent.iterdir()) == ["talk.srt"]

    def test_extraction_failure_skips_whisper(self, dispatcher, fake_invoker, media_file, tmp_path):
        fake_invoker.results = [failed("no audio stream")]
        envelope = dispatcher.dispatch(
            "generate_subtitles", {"input": str(media_file), "output": str(tmp_path / "a.srt")}
        )
        assert envelope.message == "Audio extraction failed"
        assert len(fake_invoker.calls) == 1

    def test_whisper_failure(self, dispatcher, fake_invoker, media_file, tmp_path):
        fake_invoker.results = [ok(), failed("CUDA out of memory")]
        envelope = dispatcher.dispatch(
            "generate_subtitles", {"input": str(media_file), "output": str(tmp_path / "a.srt")}
        )
        assert envelope.error == ErrorKind.EXTERNAL_TOOL_FAILURE
        assert envelope.message == "Whisper transcription failed"
        assert envelope.diagnostics == "CUDA out of memory"

    def test_extracted_audio_removed_on_whisper_failure(
        self, dispatcher, fake_invoker, media_file, tmp_path, work_dir
    ):
        """Test the extracted WAV is removed even when whisper fails."""
        extracted = []

        def emulate(executable, args):
            if executable == "ffmpeg":
                wav = Path(args[-1])
                wav.write_bytes(b"RIFF")
                extracted.append(wav)

        fake_invoker.on_run = emulate
        fake_invoker.results = [ok(), failed("CUDA out of memory")]
        envelope = dispatcher.dispatch(
            "generate_subtitles", {"input": str(media_file), "output": str(tmp_path / "a.srt")}
        )

        assert envelope.error == ErrorKind.EXTERNAL_TOOL_FAILURE
        assert extracted and extracted[0].parent == work_dir
        assert not extracted[0].exists()
        assert list(work_dir.iterdir()) == []

    def test_missing_whisper_output(self, dispatcher, fake_invoker, media_file, tmp_path):
        """Test a transcript that never appeared is an internal fault."""
        fake_invoker.results = [ok(), ok(stderr="Detected language: English")]
        envelope = dispatcher.dispatch(
            "generate_subtitles", {"input": str(media_file), "output": str(tmp_path / "a.srt")}
        )
        assert envelope.error == ErrorKind.INTERNAL_FAULT
        assert envelope.diagnostics == "Detected language: English"
        assert not (tmp_path / "a.srt").exists()


class TestFromConfig:
    """Tests for building a dispatcher from configuration."""

    def test_from_config(self, tmp_path, _mock_shutil_which):
        config = AppConfig()
        config.server.temp_dir = tmp_path
        config.tools.timeout = 60

        dispatcher = Dispatcher.from_config(config)

        assert dispatcher.temp_dir == tmp_path
        assert dispatcher.invoker.timeout == 60
        assert dispatcher.executable(Tool.FFMPEG) == "/usr/bin/ffmpeg"
        assert dispatcher.executable(Tool.WHISPER) == "whisper"
        assert len(dispatcher.catalog) == 18
