"""Pytest fixtures for hook wrapper tests."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from hook_wrapper.config import Settings, override_settings, reset_settings

# ---------------------------------------------------------------------------
# Basic fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Provide an empty directory for wrapper temp files."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def test_settings(scratch_dir: Path) -> Generator[Settings, None, None]:
    """Provide test settings that keep temp files in scratch_dir."""
    settings = Settings(
        temp_dir=scratch_dir,
        posix_shell=shutil.which("bash") or "/bin/bash",
        log_level="DEBUG",
    )
    override_settings(settings)
    yield settings
    reset_settings()


@pytest.fixture
def make_hook(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a hook script into a hooks directory."""
    hooks_dir = tmp_path / "hooks"
    hooks_dir.mkdir()

    def _make_hook(body: str, name: str = "pre-command") -> Path:
        path = hooks_dir / name
        path.write_text(body, encoding="utf-8", newline="\n")
        return path

    return _make_hook
