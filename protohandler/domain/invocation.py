from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

SourceKind = Literal["file", "inline"]


@dataclass(frozen=True)
class ScriptSource:
    text: str
    origin: str
    kind: SourceKind

    @property
    def filename(self) -> str:
        return self.origin if self.kind == "file" else "<inline>"


@dataclass(frozen=True)
class Invocation:
    """A staged script plus its named parameters, ready to run once."""

    source: ScriptSource
    parameters: tuple[tuple[str, Any], ...] = field(default_factory=tuple)

    @property
    def parameter_map(self) -> Mapping[str, Any]:
        return dict(self.parameters)

