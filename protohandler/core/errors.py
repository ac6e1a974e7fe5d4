from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "information"]


@dataclass
class ProtoHandlerError(Exception):
    code: str
    message: str
    detail: str | None = None
    severity: Severity = "error"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class ConfigNotFound(ProtoHandlerError):
    """An explicitly requested settings or log file does not exist."""

    def __init__(self, path: object, *, what: str = "Settings file") -> None:
        super().__init__(
            code="config_not_found",
            message=f"{what} '{path}' could not be found",
        )
        self.path = str(path)


class ConfigInvalid(ProtoHandlerError):
    """The settings document exists but cannot be used."""

    def __init__(self, path: object, detail: str | None = None) -> None:
        super().__init__(
            code="config_invalid",
            message=f"Could not parse settings file '{path}'",
            detail=detail,
        )
        self.path = str(path)


class LoggerMisconfigured(ProtoHandlerError):
    def __init__(self) -> None:
        super().__init__(
            code="logger_misconfigured",
            message="The file path for logging has not been set",
        )


class InvokerStateError(ProtoHandlerError):
    def __init__(self, message: str) -> None:
        super().__init__(code="invoker_state", message=message)


def format_error(error: BaseException) -> tuple[str, Severity]:
    if isinstance(error, ProtoHandlerError):
        prefix = f"[{error.code}] " if error.code else ""
        return f"{prefix}{error}", error.severity
    return f"{error}", "error"


def wrap_error(
    error: BaseException,
    *,
    code: str,
    message: str,
    severity: Severity = "error",
) -> ProtoHandlerError:
    if isinstance(error, ProtoHandlerError):
        return error
    detail = str(error) or type(error).__name__
    return ProtoHandlerError(code=code, message=message, detail=detail, severity=severity)
