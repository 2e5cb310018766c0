"""Pytest configuration and common fixtures."""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

# Set environment variables BEFORE any ivac_bot imports
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from ivac_bot.core.config.config_models import RunConfig
from ivac_bot.core.config.settings import reset_settings
from tests.fakes import ScriptedTransport, make_config_dict


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Isolate process settings per test."""
    monkeypatch.setenv("ENV", "testing")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def config_dict() -> Dict[str, Any]:
    """Canonical configuration dictionary."""
    return make_config_dict()


@pytest.fixture
def run_config() -> RunConfig:
    """Canonical RunConfig with zero retry delay."""
    return RunConfig.from_dict(make_config_dict())


@pytest.fixture
def make_run_config() -> Callable[..., RunConfig]:
    """Factory for RunConfig with workflow overrides."""

    def _make(**workflow: Any) -> RunConfig:
        return RunConfig.from_dict(make_config_dict(**workflow))

    return _make


@pytest.fixture
def transport() -> ScriptedTransport:
    """Empty scripted transport."""
    return ScriptedTransport()
