from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from protohandler.core import paths
from protohandler.core.errors import ConfigNotFound
from protohandler.core.logging import get_logger, log_event
from protohandler.core.settings_store import SettingsStore

logger = get_logger(__name__)


def expand_path(value: str | os.PathLike[str]) -> Path:
    """Expand ``~`` and environment variables (``$VAR`` / ``%VAR%``)."""
    return Path(os.path.expandvars(os.path.expanduser(str(value))))


@dataclass(frozen=True)
class Settings:
    log_file: Path
    script_path: Path

    def with_log_file(self, path: Path) -> "Settings":
        return replace(self, log_file=path)


@dataclass(frozen=True)
class SettingsDefaults:
    """Compiled defaults handed to the resolver."""

    settings_file: Path
    log_file: Path
    script_path: Path

    @classmethod
    def for_platform(cls, home: Path | None = None) -> "SettingsDefaults":
        return cls(
            settings_file=paths.config_dir(home) / paths.SETTINGS_FILENAME,
            log_file=paths.log_dir(home) / paths.LOG_FILENAME,
            script_path=paths.scripts_dir(home) / paths.DEFAULT_SCRIPT_NAME,
        )

    def to_settings(self) -> Settings:
        return Settings(log_file=self.log_file, script_path=self.script_path)


class SettingsResolver:
    """Layer an optional settings document over compiled defaults."""

    def __init__(self, defaults: SettingsDefaults) -> None:
        self._defaults = defaults
        self._settings = defaults.to_settings()

    @property
    def defaults(self) -> SettingsDefaults:
        return self._defaults

    @property
    def settings(self) -> Settings:
        return self._settings

    def load(self, path: str | os.PathLike[str] | None = None) -> Settings:
        """Apply the keys present in a settings document.

        An explicit path that does not exist raises ConfigNotFound. With no
        path the default document is used when it exists; otherwise the
        current values are kept as they are.
        """
        explicit = bool(path) and bool(str(path).strip())
        target = expand_path(path) if explicit else self._defaults.settings_file
        store = SettingsStore(target)

        if not store.exists():
            if explicit:
                raise ConfigNotFound(target)
            log_event(logger, "settings_default_missing", path=str(target))
            return self._settings

        document = store.load()
        settings = self._settings
        if document.LogFile:
            settings = replace(settings, log_file=expand_path(document.LogFile))
        if document.ScriptPath:
            settings = replace(settings, script_path=expand_path(document.ScriptPath))
        self._settings = settings
        log_event(
            logger,
            "settings_loaded",
            path=str(target),
            log_file=str(settings.log_file),
            script_path=str(settings.script_path),
        )
        return settings

    def override_log_file(self, path: str | os.PathLike[str]) -> Settings:
        """Point the run at an existing log file given on the command line."""
        candidate = expand_path(path)
        if not candidate.is_file():
            raise ConfigNotFound(candidate, what="Log file")
        self._settings = self._settings.with_log_file(candidate)
        return self._settings
