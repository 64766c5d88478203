"""Process launcher for wrapped hooks.

Runs a HookWrapper's script as a child process, waits for it, and collects
the environment changes. The wrapper is always closed, including when the
hook times out or fails.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hook_wrapper.config import Settings, get_settings
from hook_wrapper.core.diff import EnvironmentDiff
from hook_wrapper.core.errors import SnapshotReadError
from hook_wrapper.core.logging import hook_context
from hook_wrapper.core.platform import Platform, current_platform
from hook_wrapper.wrapper import HookWrapper

logger = logging.getLogger(__name__)

TIMED_OUT_EXIT_CODE = -1


@dataclass
class HookRunResult:
    """Result of running a single hook.

    Attributes:
        hook_path: Absolute path of the hook that ran.
        exit_code: Exit code of the hook (-1 if it timed out).
        changed_env: Variables the hook exported or changed.
        timed_out: Whether the hook was killed after the timeout.
    """

    hook_path: Path
    exit_code: int
    changed_env: EnvironmentDiff = field(default_factory=EnvironmentDiff)
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    def to_dict(self) -> dict[str, Any]:
        """Convert to serializable dictionary."""
        return {
            "hook_path": str(self.hook_path),
            "exit_code": self.exit_code,
            "timed_out": self.timed_out,
            "changed": self.changed_env.to_dict(),
        }


def _command_for(script_path: str, platform: Platform) -> list[str]:
    if platform is Platform.WINDOWS:
        return ["cmd.exe", "/C", script_path]
    return [script_path]


def run_hook(
    hook_path: str | Path,
    *,
    env: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
    timeout: float | None = None,
    platform: Platform | None = None,
    settings: Settings | None = None,
) -> HookRunResult:
    """Run a hook through a wrapper script and collect its environment changes.

    Args:
        hook_path: Path to the hook script.
        env: Environment for the hook (defaults to the current environment).
        cwd: Working directory for the hook.
        timeout: Seconds to wait before killing the hook (defaults to settings).
        platform: Target platform (defaults to the current platform).
        settings: Settings to use (defaults to get_settings()).

    Returns:
        HookRunResult with the exit code and changed variables.

    Raises:
        PathResolutionError: If the hook path cannot be resolved.
        TempFileError: If the wrapper cannot be built (the hook never started).
        SnapshotReadError: If the hook completed but its dumps cannot be read.
    """
    settings = settings or get_settings()
    platform = platform or current_platform()
    timeout = timeout if timeout is not None else settings.hook_timeout_seconds

    wrapper = HookWrapper.create(hook_path, platform=platform, settings=settings)
    try:
        with hook_context(wrapper.hook_path.name):
            logger.info(f"Running hook {wrapper.hook_path.name}")
            try:
                completed = subprocess.run(
                    _command_for(wrapper.path, platform),
                    env=dict(os.environ if env is None else env),
                    cwd=str(cwd) if cwd is not None else None,
                    timeout=timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired:
                logger.warning(f"Hook {wrapper.hook_path.name} timed out after {timeout}s")
                try:
                    changed = wrapper.changed_environment()
                except SnapshotReadError:
                    changed = EnvironmentDiff()
                return HookRunResult(
                    hook_path=wrapper.hook_path,
                    exit_code=TIMED_OUT_EXIT_CODE,
                    changed_env=changed,
                    timed_out=True,
                )

            changed = wrapper.changed_environment()
            logger.info(
                f"Hook {wrapper.hook_path.name} exited with status {completed.returncode}: "
                f"{changed.summary()}"
            )
            return HookRunResult(
                hook_path=wrapper.hook_path,
                exit_code=completed.returncode,
                changed_env=changed,
            )
    finally:
        wrapper.close()


def apply_environment_diff(
    diff: EnvironmentDiff,
    env: MutableMapping[str, str] | None = None,
) -> int:
    """Merge a hook's environment changes into an environment.

    Args:
        diff: Changes to apply.
        env: Environment to update (defaults to ``os.environ``).

    Returns:
        Number of variables set.
    """
    target = os.environ if env is None else env
    for name, value in diff.changes.items():
        target[name] = value
    if diff.changes:
        logger.debug(f"Applied {len(diff)} environment change(s): {', '.join(diff.names())}")
    return len(diff)
