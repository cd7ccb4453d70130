"""Pytest configuration for claw-hooks tests."""

import logging
import os
import sys

import pytest

from claw_hooks.config import HooksConfig


@pytest.fixture(autouse=True)
def clean_claw_hooks_env(monkeypatch, tmp_path):
    """Clear CLAW_HOOKS_ environment variables and isolate HOME for test isolation."""
    for var in [k for k in os.environ if k.startswith("CLAW_HOOKS_")]:
        monkeypatch.delenv(var, raising=False)

    # Default config path resolves under HOME
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    yield

    package_logger = logging.getLogger("claw_hooks")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def config() -> HooksConfig:
    """Default configuration, as produced by an empty config file."""
    return HooksConfig()


@pytest.fixture
def script(tmp_path):
    """Write a Python script and return a command line that runs it."""

    def _make(name: str, body: str) -> str:
        path = tmp_path / f"{name}.py"
        path.write_text(body)
        return f"{sys.executable} {path}"

    return _make
