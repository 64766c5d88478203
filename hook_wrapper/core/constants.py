"""Shared constants for wrapper scripts and temp files."""

LAST_HOOK_EXIT_STATUS_VAR = "HOOK_WRAPPER_LAST_HOOK_EXIT_STATUS"
"""Variable the wrapper script stores the hook's exit status in.

Never part of a computed diff.
"""

DEFAULT_FILE_PREFIX = "hook-wrapper"

DEFAULT_POSIX_SHELL = "/bin/bash"

RUNNER_FILE_SUFFIX = "runner"
BEFORE_ENV_FILE_SUFFIX = "env-before"
AFTER_ENV_FILE_SUFFIX = "env-after"

WINDOWS_SCRIPT_EXTENSION = ".bat"
