"""Shared fixtures for protohandler tests."""

import logging

import pytest

from protohandler.core.settings import SettingsDefaults


@pytest.fixture
def defaults(tmp_path):
    """Defaults rooted in a temporary home with no settings document."""
    home = tmp_path / "home"
    return SettingsDefaults(
        settings_file=home / "protohandler.json",
        log_file=home / "logs" / "protohandler.log",
        script_path=home / "scripts" / "no-op.py",
    )


@pytest.fixture(autouse=True)
def _reset_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
