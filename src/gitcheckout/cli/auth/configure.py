"""
gitcheckout auth configure command.

SUMMARY: Configure credentials in the repository and its submodules
"""

from __future__ import annotations

import argparse

from gitcheckout.cli import OutputFormatter, add_standard_flags, git_for, load_command_settings
from gitcheckout.core.auth.factory import get_auth_helper
from gitcheckout.core.auth.global_scope import GlobalScopeGuard
from gitcheckout.core.config import AgentEnv
from gitcheckout.core.exceptions import GitCheckoutError

SUMMARY = "Configure credentials in the repository and its submodules"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Leave the repository configured; run ``gitcheckout auth cleanup`` afterwards.

    Only the repository-local configuration outlives this process; the
    temporary global scope is torn down before returning.
    """
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        settings = load_command_settings(args)
        agent = AgentEnv.from_env()
        git = git_for(settings)
        helper = get_auth_helper(git, settings, agent)
        with GlobalScopeGuard(git, settings, helper, agent):
            helper.configure_main()
            helper.configure_submodules()
        formatter.success(helper.describe(), f"Configured {helper.helper_type.value} credentials")
        return 0
    except GitCheckoutError as e:
        formatter.error(e, error_code="auth_configure_error")
        return 1
