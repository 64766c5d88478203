"""Path utilities for locating hook scripts."""

from __future__ import annotations

import os
from pathlib import Path

from hook_wrapper.core.errors import PathResolutionError


def normalize_user_path(path: str | Path) -> Path:
    """Normalize a trusted, user-supplied path.

    Expands ~ and environment variables and makes the path absolute.
    Only use this for configuration values, never for hook paths.

    Args:
        path: Path to normalize.

    Returns:
        Normalized absolute Path.
    """
    p = Path(os.path.expandvars(os.path.expanduser(str(path))))
    try:
        p = p.resolve()
    except OSError:
        p = p.absolute()
    return p


def resolve_hook_path(path: str | Path) -> Path:
    """Resolve a hook script path to an absolute path.

    The path is made absolute against the current working directory.
    Symlinks are not followed so the hook runs from where it was found.

    Args:
        path: Relative or absolute hook path.

    Returns:
        Absolute Path to the hook.

    Raises:
        PathResolutionError: If the path is empty, contains a null byte, or
            the working directory cannot be determined.
    """
    raw = str(path)
    if not raw or not raw.strip():
        raise PathResolutionError(raw, "path is empty")
    if "\x00" in raw:
        raise PathResolutionError(raw, "path contains null bytes")

    try:
        return Path(os.path.abspath(raw))
    except (OSError, ValueError) as e:
        raise PathResolutionError(raw, str(e)) from e
