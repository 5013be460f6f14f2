"""Shared helpers for the command modules."""
from __future__ import annotations

import argparse
from typing import Any

from gitcheckout.core.config import GitSourceSettings, load_settings
from gitcheckout.core.git.command import GitCommandManager
from gitcheckout.core.stdlib_logging import configure_logging

_OVERRIDE_ARGS = {
    "repository_path": "repository_path",
    "repository_url": "repository_url",
    "username": "auth.username",
    "compatible_hosts": "compatible_hosts",
    "auth_helper": "auth_helper",
}


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed flags onto dotted settings keys (unset flags are skipped)."""
    overrides: dict[str, Any] = {}
    for attr, dotted in _OVERRIDE_ARGS.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[dotted] = value
    return overrides


def load_command_settings(args: argparse.Namespace) -> GitSourceSettings:
    """Load settings for a command and apply their log level.

    Raises:
        SettingsError: If the merged settings are invalid
    """
    settings = load_settings(getattr(args, "config", None), overrides=settings_overrides(args))
    configure_logging(
        level=getattr(args, "log_level", None) or settings.log_level,
        log_path=getattr(args, "log_file", None),
    )
    return settings


def git_for(settings: GitSourceSettings) -> GitCommandManager:
    return GitCommandManager(settings.repository_path, timeout=settings.git_timeout_seconds)


__all__ = ["settings_overrides", "load_command_settings", "git_for"]
