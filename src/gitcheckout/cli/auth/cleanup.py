"""
gitcheckout auth cleanup command.

SUMMARY: Remove credentials configured by a previous step
"""

from __future__ import annotations

import argparse

from gitcheckout.cli import OutputFormatter, add_standard_flags, git_for, load_command_settings
from gitcheckout.core.checkout import cleanup_auth
from gitcheckout.core.exceptions import GitCheckoutError

SUMMARY = "Remove credentials configured by a previous step"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        settings = load_command_settings(args)
        helper = cleanup_auth(git_for(settings), settings)
        formatter.success(helper.describe(), f"Removed {helper.helper_type.value} credentials")
        return 0
    except GitCheckoutError as e:
        formatter.error(e, error_code="auth_cleanup_error")
        return 1
