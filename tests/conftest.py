"""Fixtures shared by every test package."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Scratch directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """A minimal controller config pointing at a test namespace and Kong node."""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(
        """
controller:
  namespace: gateway
  check_interval: 2
kong:
  connection:
    base_url: http://kong-admin:8001
kubernetes:
  context: staging
"""
    )
    return config_path


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's KAC_* variables from leaking into config tests."""
    for key in list(os.environ):
        if key.startswith("KAC_"):
            monkeypatch.delenv(key, raising=False)
