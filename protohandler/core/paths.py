from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_path, user_log_path

APP_NAME = "protohandler"
APP_AUTHOR = "protohandler"
SETTINGS_FILENAME = "protohandler.json"
LOG_FILENAME = "protohandler.log"
DEFAULT_SCRIPT_NAME = "no-op.py"
DEFAULT_PROTOCOL = "snip-proto"

BUNDLED_SCRIPT = Path(__file__).resolve().parent.parent / "resources" / "no_op.py"


def config_dir(home: Path | None = None) -> Path:
    if home is not None:
        return Path(home).expanduser()
    return Path(user_config_path(APP_NAME, APP_AUTHOR))


def log_dir(home: Path | None = None) -> Path:
    if home is not None:
        return Path(home).expanduser() / "logs"
    return Path(user_log_path(APP_NAME, APP_AUTHOR))


def scripts_dir(home: Path | None = None) -> Path:
    return config_dir(home) / "scripts"
