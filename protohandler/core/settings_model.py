from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class SettingsDocument(BaseModel):
    """Keys recognised in protohandler.json.

    Both keys are optional; an absent or empty value leaves the compiled
    default in place.
    """

    model_config = ConfigDict(extra="allow")

    LogFile: str | None = None
    ScriptPath: str | None = None

    @field_validator("LogFile", "ScriptPath", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
