from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Callable

from protohandler.core.errors import LoggerMisconfigured

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_timestamp(clock: Callable[[], datetime]) -> str:
    return clock().strftime(TIMESTAMP_FORMAT)


class ActivationLog:
    """Append-only log file written once per line.

    Every ``write`` opens, appends and closes the file so a crash never
    loses buffered lines. One writer per process is assumed.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._clock = clock
        self._path: Path | None = None
        if path is None:
            return
        raw = os.fspath(path)
        if not raw or raw == ".":
            raise LoggerMisconfigured()
        candidate = Path(path)
        if candidate.is_file():
            self._path = candidate
        else:
            self._create(candidate)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_bound(self) -> bool:
        return self._path is not None

    def write(self, message: str) -> None:
        if self._path is None:
            raise LoggerMisconfigured()
        line = f"[{_format_timestamp(self._clock)}]: {message}\n"
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)

    def _create(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            banner = f"--- Log file started {_format_timestamp(self._clock)} ---\n"
            path.write_text(banner, encoding="utf-8")
        self._path = path
