"""Submodule enumeration and ``git submodule status`` parsing.

The enumerator is re-run on every configure/remove pass: submodule trees can
change between pipeline steps, so nothing here is cached.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from gitcheckout.core.constants import ORIGIN_REMOTE_NAME
from gitcheckout.core.git.command import GitConfigScope

if TYPE_CHECKING:
    from gitcheckout.core.git.command import GitCommandManager

logger = logging.getLogger(__name__)

GITMODULES = ".gitmodules"
_SUBMODULE_KEY_REGEX = r"^submodule\..*\.(path|url)$"


@dataclass(frozen=True, slots=True)
class Submodule:
    """A submodule declared in ``.gitmodules``."""

    name: str
    path: str
    absolute_path: Path
    url: str

    @property
    def initialized(self) -> bool:
        """Whether the working tree has been cloned (an empty directory is not)."""
        return (self.absolute_path / ".git").exists()


@dataclass(frozen=True, slots=True)
class SubmoduleStatus:
    """One parsed line of ``git submodule status``."""

    status: str
    commit_id: str
    path: str
    ref: str


def resolve_submodule_url(url: str, parent_url: str) -> str:
    """Resolve a ``./`` or ``../`` submodule URL against the parent remote."""
    if not (url.startswith("./") or url.startswith("../")) or not parent_url:
        return url
    base = parent_url.rstrip("/")
    scp_prefix = ""
    if "://" not in base and ":" in base:
        # SCP-like parent (git@host:group/repo)
        scp_prefix, _, base = base.partition(":")
        scp_prefix += ":"
    parts = base.split("/")
    remainder = url
    while True:
        if remainder.startswith("./"):
            remainder = remainder[2:]
        elif remainder.startswith("../"):
            remainder = remainder[3:]
            if parts:
                parts.pop()
        else:
            break
    return scp_prefix + "/".join([*parts, remainder])


def _read_gitmodules(git: "GitCommandManager", repository_dir: Path) -> dict[str, dict[str, str]]:
    gitmodules = repository_dir / GITMODULES
    if not gitmodules.exists():
        return {}
    pairs = git.try_config_get_regexp(
        _SUBMODULE_KEY_REGEX,
        scope=GitConfigScope.FILE,
        config_file=gitmodules,
        cwd=repository_dir,
    )
    modules: dict[str, dict[str, str]] = {}
    for key, value in pairs:
        name, _, attr = key[len("submodule."):].rpartition(".")
        modules.setdefault(name, {})[attr] = value
    return modules


def get_submodules(
    git: "GitCommandManager",
    repository_dir: Path | str,
    *,
    recursive: bool = False,
) -> list[Submodule]:
    """Enumerate submodules declared under ``repository_dir``.

    Args:
        git: Command runner
        repository_dir: Working tree containing ``.gitmodules``
        recursive: Also descend into initialized nested submodules

    Returns:
        Submodules in declaration order, parents before children
    """
    root = Path(repository_dir)
    parent_url = git.try_config_get(f"remote.{ORIGIN_REMOTE_NAME}.url", cwd=root) if (root / ".git").exists() else ""
    submodules: list[Submodule] = []
    for name, attrs in _read_gitmodules(git, root).items():
        path = attrs.get("path")
        url = attrs.get("url")
        if not path or not url:
            logger.debug("Skipping incomplete submodule declaration %s", name)
            continue
        submodule = Submodule(
            name=name,
            path=path,
            absolute_path=root / path,
            url=resolve_submodule_url(url, parent_url),
        )
        submodules.append(submodule)
        if recursive and (submodule.absolute_path / GITMODULES).exists():
            submodules.extend(get_submodules(git, submodule.absolute_path, recursive=True))
    return submodules


def parse_submodule_status(output: str | Iterable[str]) -> list[SubmoduleStatus]:
    """Parse ``git submodule status`` output.

    Each line reads ``[ +-U]<sha> <path>[ (<describe>)]``. The path may contain
    spaces and non-ASCII characters; a missing or empty describe yields
    ``ref == ""``.
    """
    lines = output.splitlines() if isinstance(output, str) else list(output)
    statuses: list[SubmoduleStatus] = []
    for line in lines:
        if not line.strip():
            continue
        status = line[0] if line[0] in " +-U" else ""
        body = line[1:] if status else line
        commit_id, _, rest = body.partition(" ")
        rest = rest.rstrip()
        ref = ""
        if rest.endswith(")") and " (" in rest:
            rest, _, describe = rest.rpartition(" (")
            ref = describe[:-1]
        statuses.append(
            SubmoduleStatus(status=status.strip(), commit_id=commit_id, path=rest.strip(), ref=ref)
        )
    return statuses


__all__ = [
    "GITMODULES",
    "Submodule",
    "SubmoduleStatus",
    "resolve_submodule_url",
    "get_submodules",
    "parse_submodule_status",
]
