from __future__ import annotations

import json
import logging
import sys
from typing import Any


def get_logger(name: str = "protohandler") -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    *,
    level: str = "warning",
    format_name: str = "json",
    stream=None,
) -> None:
    """Route diagnostic events to stderr.

    The activation log is written separately; this only covers the
    process-level diagnostics a developer sees when running the handler
    from a terminal.
    """
    normalized = level.strip().upper()
    level_value = getattr(logging, normalized, logging.WARNING)
    if format_name == "json":
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter("%(levelname)s %(name)s %(message)s")
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(level_value)
    if not root.handlers:
        root.addHandler(handler)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    payload = {"event": event, **fields}
    logger.info(json.dumps(payload, sort_keys=True, default=str))
