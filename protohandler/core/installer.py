from __future__ import annotations

import shutil
from pathlib import Path

from protohandler.core import paths
from protohandler.core.logging import get_logger, log_event
from protohandler.core.settings import SettingsDefaults
from protohandler.core.settings_store import SettingsStore

logger = get_logger(__name__)


class ProtocolInstaller:
    """Prepare an install location for a protocol handler."""

    def __init__(
        self,
        defaults: SettingsDefaults,
        protocol: str = paths.DEFAULT_PROTOCOL,
        *,
        bundled_script: Path = paths.BUNDLED_SCRIPT,
    ) -> None:
        self.defaults = defaults
        self.protocol = protocol or paths.DEFAULT_PROTOCOL
        self._bundled_script = bundled_script

    def run(self) -> list[Path]:
        self.register()
        return self.write_settings()

    def register(self) -> bool:
        # TODO: write HKCU\Software\Classes\<protocol> on Windows and an
        # x-scheme-handler .desktop entry on Linux.
        logger.warning(
            "Registering the '%s' protocol with the operating system is not implemented",
            self.protocol,
        )
        return False

    def write_settings(self) -> list[Path]:
        """Write the settings document and default script if they are absent."""
        written: list[Path] = []
        store = SettingsStore(self.defaults.settings_file)
        if not store.exists():
            store.save(
                {
                    "LogFile": str(self.defaults.log_file),
                    "ScriptPath": str(self.defaults.script_path),
                }
            )
            written.append(store.path)

        script_path = self.defaults.script_path
        if not script_path.exists():
            script_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self._bundled_script, script_path)
            written.append(script_path)

        log_event(
            logger,
            "install_written",
            protocol=self.protocol,
            files=[str(path) for path in written],
        )
        return written
