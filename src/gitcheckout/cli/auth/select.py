"""
gitcheckout auth select command.

SUMMARY: Show which credential strategy would be used
"""

from __future__ import annotations

import argparse

from gitcheckout.cli import OutputFormatter, add_standard_flags, git_for, load_command_settings
from gitcheckout.core.auth.factory import get_auth_helper
from gitcheckout.core.config import AgentEnv
from gitcheckout.core.exceptions import GitCheckoutError

SUMMARY = "Show which credential strategy would be used"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Inspect the agent and report the selected strategy without changing anything."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        settings = load_command_settings(args)
        agent = AgentEnv.from_env()
        helper = get_auth_helper(git_for(settings), settings, agent)
        info = helper.describe()
        info["docker"] = agent.is_docker()
        info["third_party"] = agent.is_third_party()
        formatter.success(info, helper.helper_type.value)
        if not formatter.json_mode:
            formatter.text_kv("host", helper.server_info.host_name)
            formatter.text_kv("hosts", ", ".join(info["hosts"]))
        return 0
    except GitCheckoutError as e:
        formatter.error(e, error_code="auth_select_error")
        return 1
