from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Callable

from protohandler.core.activation_log import ActivationLog
from protohandler.core.errors import format_error, wrap_error
from protohandler.core.logging import get_logger, log_event
from protohandler.core.script_invoker import ScriptInvoker
from protohandler.core.settings import Settings, SettingsDefaults, SettingsResolver
from protohandler.core.uri import decode_activation_uri, get_protocol
from protohandler.domain.activation import ActivationRequest

logger = get_logger(__name__)

FINISHED_MARKER = "protohandler finished"

_LEVEL_BY_SEVERITY = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "information": logging.INFO,
}


class PipelineStage(IntEnum):
    START = 0
    SETTINGS_RESOLVED = 1
    LOGGER_READY = 2
    SCRIPT_PATH_CHECKED = 3
    URI_DECODED = 4
    STAGED = 5
    EXECUTED = 6
    COMPLETED = 7


@dataclass(frozen=True)
class PipelineOutcome:
    stage: PipelineStage
    uri: str
    log_file: Path
    results: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is PipelineStage.COMPLETED and self.error is None


class ActivationPipeline:
    """Handle one OS activation from settings through script completion.

    Failures while resolving settings propagate and end the process before
    anything is logged. Once the activation log exists every later failure
    is written to it and the run still ends with the finished marker. A
    failing script therefore does not change the exit status; check the
    log (or ``PipelineOutcome.error``) to find out what went wrong.
    """

    def __init__(
        self,
        defaults: SettingsDefaults,
        *,
        base_dir: Path | None = None,
        log_factory: Callable[[Path], ActivationLog] = ActivationLog,
        invoker_factory: Callable[[], ScriptInvoker] = ScriptInvoker,
    ) -> None:
        self._defaults = defaults
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent
        self._log_factory = log_factory
        self._invoker_factory = invoker_factory
        self._stage = PipelineStage.START

    @property
    def stage(self) -> PipelineStage:
        return self._stage

    def run(self, request: ActivationRequest) -> PipelineOutcome:
        if self._stage is not PipelineStage.START:
            raise RuntimeError("An ActivationPipeline handles a single activation.")

        settings = self._resolve_settings(request)
        self._advance(PipelineStage.SETTINGS_RESOLVED)

        log = self._log_factory(settings.log_file)
        log.write(f"Starting protohandler in {self._base_dir}")
        self._advance(PipelineStage.LOGGER_READY)

        self._check_script_path(log, settings)
        self._advance(PipelineStage.SCRIPT_PATH_CHECKED)

        uri = decode_activation_uri(request.uri)
        protocol = get_protocol(uri)
        if protocol is not None:
            log.write(f"Uri contains protocol {protocol}")
        self._advance(PipelineStage.URI_DECODED)

        results: list[str] = []
        error: str | None = None
        try:
            log.write(f"- setting URI to {uri}")
            invoker = (
                self._invoker_factory()
                .add_script(settings.script_path)
                .add_parameter("Uri", uri)
                .add_parameter("LogFile", str(settings.log_file))
            )
            self._advance(PipelineStage.STAGED)
            log.write("- Invoking script")
            for result in invoker.run():
                rendered = str(result)
                results.append(rendered)
                log.write(f"- Script output: '{rendered}'")
            self._advance(PipelineStage.EXECUTED)
        except (Exception, SystemExit) as exc:
            # sys.exit(0) from a script is a clean stop, still recorded
            clean_exit = isinstance(exc, SystemExit) and exc.code in (None, 0)
            wrapped = wrap_error(
                exc,
                code="script_execution",
                message="Script execution failed",
                severity="warning" if clean_exit else "error",
            )
            error, severity = format_error(wrapped)
            log.write(error)
            logger.log(_LEVEL_BY_SEVERITY[severity], "script execution failed: %s", error)

        log.write(FINISHED_MARKER)
        self._advance(PipelineStage.COMPLETED)
        return PipelineOutcome(
            stage=self._stage,
            uri=uri,
            log_file=settings.log_file,
            results=results,
            error=error,
        )

    def _resolve_settings(self, request: ActivationRequest) -> Settings:
        resolver = SettingsResolver(self._defaults)
        resolver.load(request.settings_path or None)
        if request.log_path:
            resolver.override_log_file(request.log_path)
        return resolver.settings

    def _check_script_path(self, log: ActivationLog, settings: Settings) -> None:
        if not settings.script_path.is_file():
            log.write(f"ERROR could not find scriptPath {settings.script_path}")
            log_event(logger, "script_missing", path=str(settings.script_path))
        else:
            log.write(f"Loading script from Path {settings.script_path}")

    def _advance(self, stage: PipelineStage) -> None:
        if stage <= self._stage:
            raise RuntimeError(f"Cannot move from {self._stage.name} to {stage.name}")
        self._stage = stage
        log_event(logger, "pipeline_stage", stage=stage.name)
