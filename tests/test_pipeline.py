"""Tests for the activation pipeline.

Script failures are swallowed at a single boundary once the activation log
exists: they are written to the log and the run still finishes. Several
tests below pin that behaviour down on purpose.
"""

import json
import re

import pytest

from protohandler.core.errors import ConfigNotFound
from protohandler.core.pipeline import FINISHED_MARKER, ActivationPipeline, PipelineStage
from protohandler.domain.activation import ActivationRequest

LINE_RE = re.compile(r"^\[[^\]]+\]: (?P<msg>.*)$")


def messages(path):
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("--- Log file started")
    return [LINE_RE.match(line).group("msg") for line in lines[1:]]


def install_script(defaults, body):
    defaults.script_path.parent.mkdir(parents=True, exist_ok=True)
    defaults.script_path.write_text(body, encoding="utf-8")


class TestActivationPipeline:
    def test_successful_run_logs_every_result(self, defaults):
        install_script(defaults, "emit('A')\nemit('B: ' + Uri)\n")
        outcome = ActivationPipeline(defaults).run(
            ActivationRequest(uri="snip-proto://example.com/%20test")
        )

        assert outcome.succeeded
        assert outcome.stage is PipelineStage.COMPLETED
        assert outcome.uri == "snip-proto://example.com/ test"
        assert outcome.results == ["A", "B: snip-proto://example.com/ test"]

        logged = messages(defaults.log_file)
        assert logged[0].startswith("Starting protohandler in ")
        assert logged[1] == f"Loading script from Path {defaults.script_path}"
        assert logged[2] == "Uri contains protocol snip-proto"
        assert logged[3] == "- setting URI to snip-proto://example.com/ test"
        assert logged[4] == "- Invoking script"
        assert logged[5:7] == [
            "- Script output: 'A'",
            "- Script output: 'B: snip-proto://example.com/ test'",
        ]
        assert logged[-1] == FINISHED_MARKER

    def test_script_receives_log_file_parameter(self, defaults):
        install_script(defaults, "emit(LogFile)\n")
        outcome = ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))
        assert outcome.results == [str(defaults.log_file)]

    def test_script_fault_is_logged_once_and_run_completes(self, defaults):
        install_script(defaults, "emit('partial')\nraise RuntimeError('kaboom')\n")
        outcome = ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))

        assert outcome.stage is PipelineStage.COMPLETED
        assert not outcome.succeeded
        assert "kaboom" in outcome.error

        logged = messages(defaults.log_file)
        errors = [line for line in logged if "kaboom" in line]
        assert errors == ["[script_execution] Script execution failed (kaboom)"]
        assert logged.index(errors[0]) == len(logged) - 2
        assert logged[-1] == FINISHED_MARKER
        assert not any(line.startswith("- Script output") for line in logged)

    def test_missing_script_warns_then_fails_softly(self, defaults):
        outcome = ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))

        logged = messages(defaults.log_file)
        warnings = [line for line in logged if line.startswith("ERROR could not find scriptPath")]
        assert warnings == [f"ERROR could not find scriptPath {defaults.script_path}"]
        failures = [line for line in logged if line.startswith("[script_execution]")]
        assert len(failures) == 1
        assert logged[-1] == FINISHED_MARKER
        assert outcome.stage is PipelineStage.COMPLETED
        assert outcome.error is not None

    def test_explicit_settings_document(self, defaults, tmp_path):
        script = tmp_path / "custom.py"
        script.write_text("emit('custom')\n", encoding="utf-8")
        log = tmp_path / "elsewhere" / "custom.log"
        settings = tmp_path / "settings.json"
        settings.write_text(
            json.dumps({"LogFile": str(log), "ScriptPath": str(script)}),
            encoding="utf-8",
        )

        outcome = ActivationPipeline(defaults).run(
            ActivationRequest(uri="snip-proto://x", settings_path=str(settings))
        )

        assert outcome.log_file == log
        assert outcome.results == ["custom"]
        assert not defaults.log_file.exists()
        assert messages(log)[-1] == FINISHED_MARKER

    def test_missing_settings_file_aborts_before_logging(self, defaults, tmp_path):
        pipeline = ActivationPipeline(defaults)
        with pytest.raises(ConfigNotFound):
            pipeline.run(
                ActivationRequest(uri="snip-proto://x", settings_path=str(tmp_path / "no.json"))
            )
        assert pipeline.stage is PipelineStage.START
        assert not defaults.log_file.exists()

    def test_log_override_must_exist(self, defaults, tmp_path):
        with pytest.raises(ConfigNotFound):
            ActivationPipeline(defaults).run(
                ActivationRequest(uri="snip-proto://x", log_path=str(tmp_path / "no.log"))
            )
        assert not defaults.log_file.exists()

    def test_log_override_is_appended(self, defaults, tmp_path):
        install_script(defaults, "emit('ok')\n")
        log = tmp_path / "cli.log"
        log.write_text("", encoding="utf-8")

        outcome = ActivationPipeline(defaults).run(
            ActivationRequest(uri="snip-proto://x", log_path=str(log))
        )

        assert outcome.log_file == log
        lines = log.read_text(encoding="utf-8").splitlines()
        assert not lines[0].startswith("--- Log file started")
        assert lines[-1].endswith(f"]: {FINISHED_MARKER}")

    def test_uri_without_scheme_skips_protocol_line(self, defaults):
        install_script(defaults, "pass\n")
        ActivationPipeline(defaults).run(ActivationRequest(uri="just%20text"))
        logged = messages(defaults.log_file)
        assert not any(line.startswith("Uri contains protocol") for line in logged)
        assert "- setting URI to just text" in logged

    def test_pipeline_handles_a_single_activation(self, defaults):
        install_script(defaults, "pass\n")
        pipeline = ActivationPipeline(defaults)
        pipeline.run(ActivationRequest(uri="snip-proto://x"))
        with pytest.raises(RuntimeError):
            pipeline.run(ActivationRequest(uri="snip-proto://x"))

    def test_script_calling_exit_still_finishes(self, defaults):
        install_script(defaults, "import sys\nsys.exit(3)\n")
        outcome = ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))
        logged = messages(defaults.log_file)
        assert logged[-2] == "[script_execution] Script execution failed (3)"
        assert logged[-1] == FINISHED_MARKER
        assert outcome.stage is PipelineStage.COMPLETED

    def test_script_fault_is_reported_at_error_level(self, defaults, caplog):
        install_script(defaults, "raise RuntimeError('kaboom')\n")
        with caplog.at_level("WARNING", logger="protohandler"):
            ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))
        records = [r for r in caplog.records if "script execution failed" in r.getMessage()]
        assert [r.levelname for r in records] == ["ERROR"]

    def test_clean_exit_is_reported_at_warning_level(self, defaults, caplog):
        install_script(defaults, "import sys\nemit('done')\nsys.exit(0)\n")
        with caplog.at_level("WARNING", logger="protohandler"):
            outcome = ActivationPipeline(defaults).run(ActivationRequest(uri="snip-proto://x"))
        records = [r for r in caplog.records if "script execution failed" in r.getMessage()]
        assert [r.levelname for r in records] == ["WARNING"]
        assert messages(defaults.log_file)[-1] == FINISHED_MARKER
        assert outcome.stage is PipelineStage.COMPLETED
