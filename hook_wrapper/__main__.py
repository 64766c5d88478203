"""Entry point for the hook wrapper CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

logger = logging.getLogger(__name__)

# Exit status used when the hook was killed for running too long, as timeout(1) does
TIMEOUT_EXIT_STATUS = 124


def run_version() -> None:
    """Print version information."""
    from hook_wrapper import __version__

    print(f"hook-wrapper {__version__}")


def _exit_status_for(exit_code: int, timed_out: bool) -> int:
    if timed_out:
        return TIMEOUT_EXIT_STATUS
    if exit_code < 0:
        # Killed by signal -N
        return 128 + (-exit_code)
    return exit_code


def run_hook_command(args: argparse.Namespace) -> int:
    """Run a hook and print the variables it changed.

    Args:
        args: Parsed command line arguments.

    Returns:
        The hook's exit status, or 1 if the hook could not be started.
    """
    from hook_wrapper.adapters.launcher import run_hook
    from hook_wrapper.config import get_settings, settings_summary, validate_startup
    from hook_wrapper.core.errors import ConfigurationError, HookWrapperError
    from hook_wrapper.core.logging import configure_logging

    settings = get_settings()
    configure_logging(level="DEBUG" if args.verbose else settings.log_level)
    logger.debug(f"Settings: {settings_summary(settings)}")

    try:
        for warning in validate_startup(settings):
            logger.warning(f"Configuration warning: {warning}")
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        result = run_hook(args.hook, timeout=args.timeout, settings=settings)
    except HookWrapperError as e:
        print(f"Hook failed to start: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    else:
        for name in result.changed_env.names():
            print(f"{name}={result.changed_env[name]}")

    if result.timed_out:
        print(f"Hook timed out: {Path(args.hook).name}", file=sys.stderr)
    return _exit_status_for(result.exit_code, result.timed_out)


def run_script_command(args: argparse.Namespace) -> int:
    """Print the wrapper script that would be generated for a hook.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    from hook_wrapper.config import get_settings
    from hook_wrapper.core.errors import HookWrapperError
    from hook_wrapper.core.path_utils import resolve_hook_path
    from hook_wrapper.core.platform import current_platform, parse_platform
    from hook_wrapper.core.script import generate_wrapper_script

    settings = get_settings()
    try:
        platform = parse_platform(args.platform) if args.platform else current_platform()
        script = generate_wrapper_script(
            resolve_hook_path(args.hook),
            args.before,
            args.after,
            platform=platform,
            posix_shell=settings.posix_shell,
        )
    except HookWrapperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(script)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="hook-wrapper",
        description="Run shell hooks and report the environment variables they export",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run a hook and print the variables it added or changed",
    )
    run_parser.add_argument(
        "hook",
        help="Path to the hook script",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Output exit code and changes as JSON",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait before killing the hook (default: no timeout)",
    )
    run_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    # Script command
    script_parser = subparsers.add_parser(
        "script",
        help="Print the wrapper script generated for a hook",
    )
    script_parser.add_argument(
        "hook",
        help="Path to the hook script",
    )
    script_parser.add_argument(
        "--before",
        required=True,
        help="Path of the before-dump file",
    )
    script_parser.add_argument(
        "--after",
        required=True,
        help="Path of the after-dump file",
    )
    script_parser.add_argument(
        "--platform",
        default=None,
        help="Target platform: posix or windows (default: current platform)",
    )

    return parser


def main() -> NoReturn:
    """Main entry point with subcommand support."""
    parser = build_parser()
    args = parser.parse_args()

    if args.version:
        run_version()
        sys.exit(0)

    if args.command == "run":
        sys.exit(run_hook_command(args))
    elif args.command == "script":
        sys.exit(run_script_command(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
