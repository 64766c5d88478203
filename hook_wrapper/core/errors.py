"""Custom exceptions for hook wrapper."""

from pathlib import Path


def sanitize_path_for_error(path: str | Path) -> str:
    """Extract only the filename from a path for safe error messages.

    Prevents leaking full system paths in error messages which could
    expose sensitive directory structure information.

    Args:
        path: Full path or filename.

    Returns:
        Just the filename portion.
    """
    if isinstance(path, Path):
        return path.name
    return Path(path).name


class HookWrapperError(Exception):
    """Base exception for all hook wrapper errors."""

    pass


class ConfigurationError(HookWrapperError):
    """Raised when configuration is invalid."""

    pass


class UnsupportedPlatformError(HookWrapperError):
    """Raised when a wrapper script is requested for an unknown platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Unsupported platform for hook wrapper scripts: {platform}")


class PathResolutionError(HookWrapperError):
    """Raised when a hook path cannot be made absolute.

    Note:
        Error messages only include the filename, not the full path,
        to avoid leaking system directory structure.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        safe_name = sanitize_path_for_error(path)
        super().__init__(f'Failed to find absolute path to "{safe_name}" ({reason})')


class TempFileError(HookWrapperError):
    """Raised when a scratch file cannot be created, written or made executable."""

    def __init__(self, path: str, operation: str, reason: str) -> None:
        self.path = path
        self.operation = operation
        self.reason = reason
        safe_name = sanitize_path_for_error(path)
        super().__init__(f"Failed to {operation} temporary file {safe_name} ({reason})")


class SnapshotReadError(HookWrapperError):
    """Raised when an environment dump cannot be opened.

    An empty or unparseable dump is not an error; this only covers the
    case where the file itself is unreadable, which usually means the
    wrapper script never ran.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        safe_name = sanitize_path_for_error(path)
        super().__init__(f'Failed to read "{safe_name}" ({reason})')
