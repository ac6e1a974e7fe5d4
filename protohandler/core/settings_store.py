from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from protohandler.core.errors import ConfigInvalid
from protohandler.core.settings_model import SettingsDocument


class SettingsStore:
    """Read and write a protohandler.json settings document."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> SettingsDocument:
        """Parse the document, raising ConfigInvalid when it cannot be used."""
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8-sig"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigInvalid(self._path, str(exc)) from exc
        if not isinstance(raw, dict):
            raise ConfigInvalid(self._path, "expected a JSON object")
        try:
            return SettingsDocument.model_validate(raw)
        except ValidationError as exc:
            raise ConfigInvalid(self._path, _summarize(exc)) from exc

    def save(self, settings: dict[str, Any]) -> None:
        """Persist settings to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings, indent=4), encoding="utf-8")


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)
