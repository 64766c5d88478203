"""Wrapper script generation.

A wrapper script surrounds a hook with environment capture:

1. dump the environment to the before file
2. source the hook so it can change the current shell's environment
3. save the hook's exit status before anything overwrites it
4. dump the environment to the after file
5. exit with the saved status

Each platform has one dialect implementing those steps in its shell syntax.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from hook_wrapper.core.constants import DEFAULT_POSIX_SHELL, LAST_HOOK_EXIT_STATUS_VAR
from hook_wrapper.core.platform import Platform, current_platform, parse_platform


class ScriptDialect(ABC):
    """Shell syntax for the steps of a wrapper script."""

    platform: Platform
    line_ending = "\n"

    @abstractmethod
    def header(self) -> list[str]:
        """Lines that start the script."""

    @abstractmethod
    def dump(self, path: str) -> str:
        """Write the full environment to ``path``."""

    @abstractmethod
    def invoke(self, hook_path: str) -> str:
        """Run the hook in the current shell."""

    @abstractmethod
    def capture_status(self) -> str:
        """Store the last exit status in the sentinel variable."""

    @abstractmethod
    def exit_with_status(self) -> str:
        """Exit with the stored status."""

    @abstractmethod
    def quote(self, path: str) -> str:
        """Quote a path for the shell."""

    def render(self, hook_path: str, before_path: str, after_path: str) -> str:
        lines = [
            *self.header(),
            self.dump(before_path),
            self.invoke(hook_path),
            self.capture_status(),
            self.dump(after_path),
            self.exit_with_status(),
        ]
        return self.line_ending.join(lines) + self.line_ending


class PosixDialect(ScriptDialect):
    """Bash-compatible wrapper scripts."""

    platform = Platform.POSIX

    def __init__(self, shell: str = DEFAULT_POSIX_SHELL) -> None:
        self.shell = shell

    def header(self) -> list[str]:
        return [f"#!{self.shell}"]

    def quote(self, path: str) -> str:
        escaped = (
            path.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$").replace("`", "\\`")
        )
        return f'"{escaped}"'

    def dump(self, path: str) -> str:
        return f"export -p > {self.quote(path)}"

    def invoke(self, hook_path: str) -> str:
        return f". {self.quote(hook_path)}"

    def capture_status(self) -> str:
        return f"{LAST_HOOK_EXIT_STATUS_VAR}=$?"

    def exit_with_status(self) -> str:
        return f"exit ${LAST_HOOK_EXIT_STATUS_VAR}"


class WindowsDialect(ScriptDialect):
    """cmd.exe batch wrapper scripts."""

    platform = Platform.WINDOWS
    line_ending = "\r\n"

    def header(self) -> list[str]:
        # Delayed expansion lets !ERRORLEVEL! read the value after CALL returns
        return ["@echo off", "SETLOCAL ENABLEDELAYEDEXPANSION"]

    def quote(self, path: str) -> str:
        return f'"{path}"'

    def dump(self, path: str) -> str:
        return f"SET > {self.quote(path)}"

    def invoke(self, hook_path: str) -> str:
        return f"CALL {self.quote(hook_path)}"

    def capture_status(self) -> str:
        return f"SET {LAST_HOOK_EXIT_STATUS_VAR}=!ERRORLEVEL!"

    def exit_with_status(self) -> str:
        return f"EXIT %{LAST_HOOK_EXIT_STATUS_VAR}%"


def dialect_for(platform: Platform | str, posix_shell: str = DEFAULT_POSIX_SHELL) -> ScriptDialect:
    """Select the script dialect for a platform.

    Raises:
        UnsupportedPlatformError: If the platform is not POSIX or Windows.
    """
    platform = parse_platform(platform)
    if platform is Platform.WINDOWS:
        return WindowsDialect()
    return PosixDialect(shell=posix_shell)


def generate_wrapper_script(
    hook_path: str | Path,
    before_path: str | Path,
    after_path: str | Path,
    platform: Platform | str | None = None,
    posix_shell: str = DEFAULT_POSIX_SHELL,
) -> str:
    """Generate the wrapper script text for a hook.

    Args:
        hook_path: Absolute path to the hook script.
        before_path: Absolute path of the before-dump file.
        after_path: Absolute path of the after-dump file.
        platform: Target platform (defaults to the current platform).
        posix_shell: Interpreter for the POSIX shebang line.

    Returns:
        Complete script text.

    Raises:
        UnsupportedPlatformError: If the platform is not supported.
    """
    dialect = dialect_for(platform or current_platform(), posix_shell=posix_shell)
    return dialect.render(str(hook_path), str(before_path), str(after_path))
