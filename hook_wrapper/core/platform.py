"""Platform detection and platform-specific file helpers.

Wrapper scripts come in exactly two dialects, so the platform model is a
closed set: POSIX shells and the Windows command interpreter.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from enum import Enum
from pathlib import Path

from hook_wrapper.core.constants import WINDOWS_SCRIPT_EXTENSION
from hook_wrapper.core.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """Host platforms a wrapper script can be generated for."""

    POSIX = "posix"
    WINDOWS = "windows"


_PLATFORM_ALIASES: dict[str, Platform] = {
    "posix": Platform.POSIX,
    "linux": Platform.POSIX,
    "darwin": Platform.POSIX,
    "macos": Platform.POSIX,
    "freebsd": Platform.POSIX,
    "windows": Platform.WINDOWS,
    "win32": Platform.WINDOWS,
    "nt": Platform.WINDOWS,
}


def current_platform() -> Platform:
    """Return the platform of the running interpreter."""
    if sys.platform == "win32":
        return Platform.WINDOWS
    return Platform.POSIX


def parse_platform(value: str | Platform) -> Platform:
    """Convert a platform name into a Platform.

    Args:
        value: A Platform or a name such as "linux", "darwin" or "windows".

    Returns:
        The matching Platform.

    Raises:
        UnsupportedPlatformError: If the name is not a known platform.
    """
    if isinstance(value, Platform):
        return value
    platform = _PLATFORM_ALIASES.get(value.strip().lower())
    if platform is None:
        raise UnsupportedPlatformError(value)
    return platform


def normalize_script_file_name(name: str, platform: Platform | None = None) -> str:
    """Give a script file name the extension the host needs to execute it.

    Windows only runs batch files with a ``.bat`` extension; POSIX uses
    the shebang line, so the name is returned unchanged.
    """
    platform = platform or current_platform()
    if platform is Platform.WINDOWS and not name.lower().endswith(WINDOWS_SCRIPT_EXTENSION):
        return name + WINDOWS_SCRIPT_EXTENSION
    return name


def make_executable(path: str | Path, platform: Platform | None = None) -> None:
    """Add execute permission to a file.

    Execute bits are added for the owner, and for group/other wherever
    they already have read access. No-op on Windows.

    Raises:
        OSError: If the file mode cannot be read or changed.
    """
    platform = platform or current_platform()
    if platform is Platform.WINDOWS:
        return

    mode = os.stat(path).st_mode
    mode |= stat.S_IXUSR
    if mode & stat.S_IRGRP:
        mode |= stat.S_IXGRP
    if mode & stat.S_IROTH:
        mode |= stat.S_IXOTH
    os.chmod(path, mode)
    logger.debug(f"Marked {Path(path).name} executable (mode {oct(stat.S_IMODE(mode))})")
