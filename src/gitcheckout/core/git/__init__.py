"""Git command runner, URL classification and submodule helpers."""
from __future__ import annotations

from gitcheckout.core.git.command import CommandResult, GitCommandManager, GitConfigScope
from gitcheckout.core.git.version import GitVersion
from gitcheckout.core.git.server_info import ServerInfo, get_server_info, is_same_repository, url_encode
from gitcheckout.core.git.submodules import Submodule, SubmoduleStatus, get_submodules, parse_submodule_status

__all__ = [
    "CommandResult",
    "GitCommandManager",
    "GitConfigScope",
    "GitVersion",
    "ServerInfo",
    "get_server_info",
    "is_same_repository",
    "url_encode",
    "Submodule",
    "SubmoduleStatus",
    "get_submodules",
    "parse_submodule_status",
]
