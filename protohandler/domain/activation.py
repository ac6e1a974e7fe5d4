from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActivationRequest:
    """Finalized command-line record handed to the pipeline."""

    uri: str = ""
    install: bool = False
    protocol: str = ""
    settings_path: str = ""
    log_path: str = ""
