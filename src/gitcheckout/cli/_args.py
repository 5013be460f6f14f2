"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse
from pathlib import Path


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag pointing at a YAML settings file."""
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file with a 'checkout:' section",
    )


def add_repository_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags that override repository settings.

    Secrets are intentionally not accepted as flags; they come from the
    settings file or the CHECKOUT_PASSWORD / CHECKOUT_PRIVATE_KEY variables.

    Args:
        parser: ArgumentParser to add the flags to
    """
    parser.add_argument(
        "--repo-path",
        dest="repository_path",
        type=str,
        default=None,
        help="Repository working directory (default: settings or current directory)",
    )
    parser.add_argument(
        "--repo-url",
        dest="repository_url",
        type=str,
        default=None,
        help="Remote URL of the main repository",
    )
    parser.add_argument(
        "--username",
        type=str,
        default=None,
        help="Username for HTTP remotes",
    )
    parser.add_argument(
        "--compatible-host",
        dest="compatible_hosts",
        action="append",
        default=None,
        help="Host serving the same repositories (repeatable)",
    )
    parser.add_argument(
        "--auth-helper",
        dest="auth_helper",
        choices=["ASK_PASS", "STORE_CREDENTIAL", "CUSTOM_CREDENTIAL", "USERNAME_PASSWORD", "SSH"],
        default=None,
        help="Force a credential strategy instead of selecting one",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Add --config, repository overrides and --json."""
    add_config_flag(parser)
    add_repository_flags(parser)
    add_json_flag(parser)


__all__ = ["add_json_flag", "add_config_flag", "add_repository_flags", "add_standard_flags"]
