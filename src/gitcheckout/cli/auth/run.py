"""
gitcheckout auth run command.

SUMMARY: Run a command with credentials configured, then remove them
"""

from __future__ import annotations

import argparse
import subprocess

from gitcheckout.cli import OutputFormatter, add_standard_flags, git_for, load_command_settings
from gitcheckout.core.checkout import auth_session
from gitcheckout.core.exceptions import GitCheckoutError

SUMMARY = "Run a command with credentials configured, then remove them"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_standard_flags(parser)
    parser.add_argument(
        "cmd",
        nargs=argparse.REMAINDER,
        help="Command to run, after '--' (e.g. -- git fetch origin)",
    )


def main(args: argparse.Namespace) -> int:
    """Run ``cmd`` in the repository with the credential environment.

    Returns:
        The command's exit code, or 1 when credentials cannot be set up
    """
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    cmd = list(args.cmd or [])
    if cmd and cmd[0] == "--":
        cmd = cmd[1:]
    if not cmd:
        formatter.error(ValueError("No command given"), error_code="auth_run_error")
        return 2
    try:
        settings = load_command_settings(args)
        git = git_for(settings)
        with auth_session(git, settings):
            proc = subprocess.run(
                cmd,
                cwd=settings.repository_path,
                env=git.build_environment(),
                check=False,
            )
        return proc.returncode
    except GitCheckoutError as e:
        formatter.error(e, error_code="auth_run_error")
        return 1
    except OSError as e:
        formatter.error(e, f"Unable to run {cmd[0]}: {e}", error_code="auth_run_error")
        return 127
