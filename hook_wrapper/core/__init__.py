"""Core components for hook wrapper."""

from hook_wrapper.core.constants import LAST_HOOK_EXIT_STATUS_VAR
from hook_wrapper.core.diff import EnvironmentDiff, diff_snapshots
from hook_wrapper.core.errors import (
    ConfigurationError,
    HookWrapperError,
    PathResolutionError,
    SnapshotReadError,
    TempFileError,
    UnsupportedPlatformError,
)
from hook_wrapper.core.platform import (
    Platform,
    current_platform,
    make_executable,
    normalize_script_file_name,
    parse_platform,
)
from hook_wrapper.core.script import (
    PosixDialect,
    ScriptDialect,
    WindowsDialect,
    dialect_for,
    generate_wrapper_script,
)
from hook_wrapper.core.snapshot import (
    EnvironmentSnapshot,
    decode_snapshot,
    encode_snapshot,
    read_snapshot_file,
)

__all__ = [
    # Constants
    "LAST_HOOK_EXIT_STATUS_VAR",
    # Errors
    "HookWrapperError",
    "ConfigurationError",
    "PathResolutionError",
    "SnapshotReadError",
    "TempFileError",
    "UnsupportedPlatformError",
    # Platform
    "Platform",
    "current_platform",
    "parse_platform",
    "make_executable",
    "normalize_script_file_name",
    # Snapshots
    "EnvironmentSnapshot",
    "decode_snapshot",
    "encode_snapshot",
    "read_snapshot_file",
    # Diff
    "EnvironmentDiff",
    "diff_snapshots",
    # Scripts
    "ScriptDialect",
    "PosixDialect",
    "WindowsDialect",
    "dialect_for",
    "generate_wrapper_script",
]
