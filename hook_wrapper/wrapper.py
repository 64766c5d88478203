"""Hook wrapper: temporary files around a single hook run.

Hooks get "sourced" in the sense that they run with the caller's environment
and any variables they export are captured afterwards. A child's environment
can't be read once it has exited, so the wrapper script writes the
environment to a file before the hook runs and to another file after it,
and the two are diffed.

A HookWrapper owns three temporary files for its lifetime:

- the executable wrapper script
- the before-dump, written by the script before sourcing the hook
- the after-dump, written by the script after the hook returns

Typical use::

    with HookWrapper.create("hooks/pre-command") as wrapper:
        subprocess.run([wrapper.path], check=False)
        changed = wrapper.changed_environment()
"""

from __future__ import annotations

import logging
import os
import secrets
import tempfile
from pathlib import Path
from types import TracebackType

from hook_wrapper.config import Settings, get_settings
from hook_wrapper.core.constants import (
    AFTER_ENV_FILE_SUFFIX,
    BEFORE_ENV_FILE_SUFFIX,
    RUNNER_FILE_SUFFIX,
)
from hook_wrapper.core.diff import EnvironmentDiff, diff_snapshots
from hook_wrapper.core.errors import TempFileError
from hook_wrapper.core.path_utils import normalize_user_path, resolve_hook_path
from hook_wrapper.core.platform import (
    Platform,
    current_platform,
    make_executable,
    normalize_script_file_name,
)
from hook_wrapper.core.script import generate_wrapper_script
from hook_wrapper.core.snapshot import read_snapshot_file

logger = logging.getLogger(__name__)


def _unique_prefix(name: str) -> str:
    # Token from secrets on top of mkstemp's own random part
    return f"{name}-{secrets.token_hex(4)}-"


def _create_temp_file(name: str, temp_dir: Path | None, extension: str = "") -> tuple[int, Path]:
    try:
        fd, path = tempfile.mkstemp(
            prefix=_unique_prefix(name),
            suffix=extension,
            dir=str(temp_dir) if temp_dir else None,
        )
    except OSError as e:
        raise TempFileError(name + extension, "create", e.strerror or str(e)) from e
    return fd, Path(path)


def _remove_files(paths: list[Path]) -> list[tuple[Path, OSError]]:
    """Delete files, collecting failures instead of raising.

    Files that are already gone are not failures.
    """
    failures: list[tuple[Path, OSError]] = []
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {path.name}: {e}")
            failures.append((path, e))
    return failures


class HookWrapper:
    """Wraps a hook script with environment capture.

    Use HookWrapper.create() rather than constructing directly.
    """

    def __init__(
        self,
        hook_path: Path,
        script_path: Path,
        before_env_path: Path,
        after_env_path: Path,
        platform: Platform,
        keep_files: bool = False,
    ) -> None:
        self.hook_path = hook_path
        self.script_path = script_path
        self.before_env_path = before_env_path
        self.after_env_path = after_env_path
        self.platform = platform
        self._keep_files = keep_files
        self._closed = False

    @classmethod
    def create(
        cls,
        hook_path: str | Path,
        *,
        platform: Platform | None = None,
        temp_dir: str | Path | None = None,
        settings: Settings | None = None,
    ) -> HookWrapper:
        """Allocate the temporary files and write the wrapper script.

        Args:
            hook_path: Path to the hook script, relative or absolute.
            platform: Target platform (defaults to the current platform).
            temp_dir: Directory for the temporary files (overrides settings).
            settings: Settings to use (defaults to get_settings()).

        Returns:
            A HookWrapper whose script is ready to execute.

        Raises:
            PathResolutionError: If the hook path cannot be made absolute.
            TempFileError: If a temporary file cannot be created, written or
                made executable. Files created before the failure are removed.
        """
        settings = settings or get_settings()
        platform = platform or current_platform()
        absolute_hook_path = resolve_hook_path(hook_path)

        directory = temp_dir if temp_dir is not None else settings.temp_dir
        resolved_dir = normalize_user_path(directory) if directory is not None else None
        prefix = settings.file_prefix

        created: list[Path] = []
        try:
            fd, before_env_path = _create_temp_file(
                f"{prefix}-{BEFORE_ENV_FILE_SUFFIX}", resolved_dir
            )
            created.append(before_env_path)
            os.close(fd)

            fd, after_env_path = _create_temp_file(
                f"{prefix}-{AFTER_ENV_FILE_SUFFIX}", resolved_dir
            )
            created.append(after_env_path)
            os.close(fd)

            script = generate_wrapper_script(
                absolute_hook_path,
                before_env_path,
                after_env_path,
                platform=platform,
                posix_shell=settings.posix_shell,
            )

            script_stem = f"{prefix}-{RUNNER_FILE_SUFFIX}"
            extension = normalize_script_file_name(script_stem, platform)[len(script_stem) :]
            fd, script_path = _create_temp_file(script_stem, resolved_dir, extension)
            created.append(script_path)
            try:
                # Closing flushes the script before anyone can execute it
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(script)
            except OSError as e:
                raise TempFileError(str(script_path), "write", e.strerror or str(e)) from e

            try:
                make_executable(script_path, platform)
            except OSError as e:
                raise TempFileError(
                    str(script_path), "make executable", e.strerror or str(e)
                ) from e
        except BaseException:
            _remove_files(created)
            raise

        wrapper = cls(
            hook_path=absolute_hook_path,
            script_path=script_path,
            before_env_path=before_env_path,
            after_env_path=after_env_path,
            platform=platform,
            keep_files=settings.keep_temp_files,
        )
        logger.debug(f"Created wrapper {script_path.name} for hook {absolute_hook_path.name}")
        return wrapper

    @property
    def path(self) -> str:
        """Absolute path to the wrapper script; this is what gets executed."""
        return str(self.script_path)

    @property
    def files(self) -> list[Path]:
        """The three temporary files owned by this wrapper."""
        return [self.script_path, self.before_env_path, self.after_env_path]

    @property
    def closed(self) -> bool:
        return self._closed

    def changed_environment(self) -> EnvironmentDiff:
        """Variables the hook exported or changed.

        Only valid once the wrapper script has finished running.

        Returns:
            EnvironmentDiff of added and changed variables.

        Raises:
            SnapshotReadError: If either dump file cannot be read.
        """
        before = read_snapshot_file(self.before_env_path, self.platform)
        after = read_snapshot_file(self.after_env_path, self.platform)
        return diff_snapshots(after, before)

    def close(self) -> list[tuple[Path, OSError]]:
        """Remove the wrapper script and both dump files.

        Safe to call more than once, and whether or not the hook ran.
        Deletion failures are logged, never raised.

        Returns:
            (path, error) pairs for files that could not be removed.
        """
        if self._closed:
            return []
        self._closed = True

        if self._keep_files:
            logger.debug(f"Keeping temporary files: {', '.join(str(p) for p in self.files)}")
            return []

        return _remove_files(self.files)

    def __enter__(self) -> HookWrapper:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HookWrapper(hook={self.hook_path.name}, script={self.script_path.name})"
