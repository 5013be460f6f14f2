"""
gitcheckout submodule status command.

SUMMARY: Show parsed `git submodule status` output
"""

from __future__ import annotations

import argparse
from dataclasses import asdict

from gitcheckout.cli import OutputFormatter, add_config_flag, add_json_flag, git_for, load_command_settings
from gitcheckout.core.exceptions import GitCheckoutError
from gitcheckout.core.git.submodules import parse_submodule_status

SUMMARY = "Show parsed `git submodule status` output"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command arguments."""
    add_config_flag(parser)
    parser.add_argument(
        "--repo-path",
        dest="repository_path",
        type=str,
        default=None,
        help="Repository working directory",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Include nested submodules",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        settings = load_command_settings(args)
        lines = git_for(settings).submodule_status(recursive=args.recursive)
        statuses = parse_submodule_status(lines)
        if formatter.json_mode:
            formatter.json_output([asdict(s) for s in statuses])
        else:
            for s in statuses:
                suffix = f" ({s.ref})" if s.ref else ""
                formatter.text(f"{s.status or ' '}{s.commit_id} {s.path}{suffix}")
        return 0
    except GitCheckoutError as e:
        formatter.error(e, error_code="submodule_status_error")
        return 1
