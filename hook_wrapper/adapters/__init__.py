"""Adapters that run wrapped hooks as child processes."""

from hook_wrapper.adapters.launcher import HookRunResult, apply_environment_diff, run_hook

__all__ = [
    "HookRunResult",
    "apply_environment_diff",
    "run_hook",
]
