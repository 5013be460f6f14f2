"""
gitcheckout submodule list command.

SUMMARY: List submodules declared in .gitmodules
"""

from __future__ import annotations

import argparse

from gitcheckout.cli import OutputFormatter, add_config_flag, add_json_flag, git_for, load_command_settings
from gitcheckout.core.exceptions import GitCheckoutError
from gitcheckout.core.git.server_info import get_server_info
from gitcheckout.core.git.submodules import get_submodules
from gitcheckout.core.redaction import redact_url_credentials

SUMMARY = "List submodules declared in .gitmodules"


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


def _host(url: str) -> str:
    try:
        return get_server_info(url).host_name
    except GitCheckoutError:
        return ""


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        settings = load_command_settings(args)
        submodules = get_submodules(git_for(settings), settings.repository_path, recursive=args.recursive)
        rows = [
            {
                "name": s.name,
                "path": s.path,
                "url": redact_url_credentials(s.url),
                "host": _host(s.url),
                "initialized": s.initialized,
            }
            for s in submodules
        ]
        if formatter.json_mode:
            formatter.json_output(rows)
        else:
            for row in rows:
                formatter.text(f"{row['name']}\t{row['path']}\t{row['url']}")
        return 0
    except GitCheckoutError as e:
        formatter.error(e, error_code="submodule_list_error")
        return 1
