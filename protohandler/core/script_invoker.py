from __future__ import annotations

import io
import os
from contextlib import redirect_stdout
from pathlib import Path
from types import MappingProxyType
from typing import Any

from protohandler.core.errors import InvokerStateError
from protohandler.core.logging import get_logger, log_event
from protohandler.domain.invocation import Invocation, ScriptSource

logger = get_logger(__name__)


def load_script_file(path: str | os.PathLike[str]) -> ScriptSource:
    """Stage the full contents of a script file."""
    script_path = Path(path)
    text = script_path.read_text(encoding="utf-8-sig")
    return ScriptSource(text=text, origin=str(script_path), kind="file")


def inline_script(text: str) -> ScriptSource:
    """Stage ``text`` itself as the script body."""
    return ScriptSource(text=text, origin=text, kind="inline")


def resolve_script_reference(ref: str | os.PathLike[str]) -> ScriptSource:
    """Treat ``ref`` as a file when one exists there, otherwise as inline code."""
    candidate = str(ref)
    if candidate and Path(candidate).is_file():
        return load_script_file(candidate)
    return inline_script(candidate)


class _ResultStream(io.TextIOBase):
    """Turns printed lines into script results."""

    def __init__(self, results: list[Any]) -> None:
        self._results = results
        self._pending = ""

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        self._pending += text
        while "\n" in self._pending:
            line, self._pending = self._pending.split("\n", 1)
            self._results.append(line)
        return len(text)

    def flush_pending(self) -> None:
        if self._pending:
            self._results.append(self._pending)
            self._pending = ""


def execute(invocation: Invocation) -> list[Any]:
    """Run one staged invocation and return what it produced, in order.

    Parameters become module globals and are also reachable through the
    read-only ``params`` mapping. Values passed to ``emit`` and lines
    written to stdout are collected in production order. Exceptions
    raised while compiling or running the script propagate unchanged.
    """
    source = invocation.source
    results: list[Any] = []
    stream = _ResultStream(results)
    parameters = invocation.parameter_map

    def emit(value: Any) -> None:
        stream.flush_pending()
        results.append(value)

    namespace: dict[str, Any] = {
        "__name__": "__main__",
        "params": MappingProxyType(dict(parameters)),
        "emit": emit,
    }
    if source.kind == "file":
        namespace["__file__"] = source.origin
    namespace.update(parameters)

    code = compile(source.text, source.filename, "exec")
    try:
        with redirect_stdout(stream):
            exec(code, namespace)
    finally:
        stream.flush_pending()
    return results


class ScriptInvoker:
    """Single-use builder: stage one script, attach parameters, run once."""

    def __init__(self) -> None:
        self._source: ScriptSource | None = None
        self._parameters: list[tuple[str, Any]] = []
        self._initialized = False
        self._consumed = False

    def add_script(self, ref: str | os.PathLike[str]) -> "ScriptInvoker":
        self._ensure_open()
        self._source = resolve_script_reference(ref)
        self._initialized = True
        log_event(
            logger,
            "script_staged",
            kind=self._source.kind,
            origin=self._source.filename,
        )
        return self

    def add_parameter(self, name: str, value: Any) -> "ScriptInvoker":
        self._ensure_open()
        if not name.isidentifier():
            raise InvokerStateError(f"Invalid parameter name: {name!r}")
        self._parameters.append((name, value))
        return self

    def is_initialized(self) -> bool:
        return self._initialized

    def build(self) -> Invocation:
        if self._source is None:
            raise InvokerStateError("No script has been staged.")
        return Invocation(source=self._source, parameters=tuple(self._parameters))

    def run(self) -> list[Any]:
        self._ensure_open()
        invocation = self.build()
        self._consumed = True
        log_event(
            logger,
            "script_invoked",
            origin=invocation.source.filename,
            parameters=[name for name, _ in invocation.parameters],
        )
        return execute(invocation)

    def _ensure_open(self) -> None:
        if self._consumed:
            raise InvokerStateError("This invoker has already run its script.")
