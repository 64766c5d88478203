"""Hook Wrapper - capture the environment variables a shell hook exports."""

__version__ = "0.1.0"

# Re-export core components for convenience
from hook_wrapper.adapters import HookRunResult, apply_environment_diff, run_hook
from hook_wrapper.config import Settings, get_settings
from hook_wrapper.core import (
    LAST_HOOK_EXIT_STATUS_VAR,
    ConfigurationError,
    EnvironmentDiff,
    EnvironmentSnapshot,
    HookWrapperError,
    PathResolutionError,
    Platform,
    SnapshotReadError,
    TempFileError,
    UnsupportedPlatformError,
    decode_snapshot,
    diff_snapshots,
    encode_snapshot,
    generate_wrapper_script,
)
from hook_wrapper.wrapper import HookWrapper

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "HookWrapperError",
    "ConfigurationError",
    "PathResolutionError",
    "SnapshotReadError",
    "TempFileError",
    "UnsupportedPlatformError",
    # Models
    "EnvironmentSnapshot",
    "EnvironmentDiff",
    "Platform",
    "LAST_HOOK_EXIT_STATUS_VAR",
    # Operations
    "HookWrapper",
    "decode_snapshot",
    "encode_snapshot",
    "diff_snapshots",
    "generate_wrapper_script",
    "run_hook",
    "apply_environment_diff",
    "HookRunResult",
]
