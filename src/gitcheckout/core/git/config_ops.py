"""Discrete git-config operations and exact backup/restore of local keys.

Submodule configuration is expressed as an ordered list of
:class:`ConfigOperation` values applied one at a time, so a failing operation
never hides the ones after it.

:class:`ConfigBackup` records the values a repository had before we touched
them in a ``checkout-backup`` section of that repository's own config. The
record lives next to the data it protects, so a cleanup step running in a
later process restores the same state.
Sections a restore leaves empty are removed as well.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

from gitcheckout.core.constants import BACKUP_SECTION
from gitcheckout.core.exceptions import GitCommandError
from gitcheckout.core.git.command import GitConfigScope

if TYPE_CHECKING:
    from gitcheckout.core.git.command import GitCommandManager

logger = logging.getLogger(__name__)

# git section names are alphanumerics and "-".
_SECTION_NAME_RE = re.compile(r"^[A-Za-z0-9-]+$")


class ConfigAction(str, Enum):
    SET = "set"
    ADD = "add"
    UNSET_ALL = "unset-all"
    REMOVE_SECTION = "remove-section"


@dataclass(frozen=True, slots=True)
class ConfigOperation:
    """A single ``git config`` mutation."""

    action: ConfigAction
    key: str
    value: str = ""

    @classmethod
    def set(cls, key: str, value: str) -> "ConfigOperation":
        return cls(ConfigAction.SET, key, value)

    @classmethod
    def add(cls, key: str, value: str) -> "ConfigOperation":
        return cls(ConfigAction.ADD, key, value)

    @classmethod
    def unset(cls, key: str) -> "ConfigOperation":
        return cls(ConfigAction.UNSET_ALL, key)

    @classmethod
    def remove_section(cls, section: str) -> "ConfigOperation":
        return cls(ConfigAction.REMOVE_SECTION, section)

    def apply(
        self,
        git: "GitCommandManager",
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
    ) -> None:
        """Apply the operation.

        Raises:
            GitCommandError: When a SET or ADD fails
        """
        if self.action is ConfigAction.SET:
            git.config(self.key, self.value, scope=scope, cwd=cwd)
        elif self.action is ConfigAction.ADD:
            git.config_add(self.key, self.value, scope=scope, cwd=cwd)
        elif self.action is ConfigAction.UNSET_ALL:
            git.try_config_unset(self.key, scope=scope, cwd=cwd)
        else:
            git.try_config_remove_section(self.key, scope=scope, cwd=cwd)


def apply_operations(
    git: "GitCommandManager",
    operations: Sequence[ConfigOperation],
    *,
    scope: GitConfigScope = GitConfigScope.LOCAL,
    cwd: Path | str | None = None,
) -> int:
    """Apply ``operations`` in order, skipping (and logging) failures.

    Returns:
        Number of operations that failed
    """
    failures = 0
    for op in operations:
        try:
            op.apply(git, scope=scope, cwd=cwd)
        except GitCommandError as e:
            failures += 1
            logger.debug("Skipping failed config operation %s %s: %s", op.action.value, op.key, e)
    return failures


def touched_keys(operations: Iterable[ConfigOperation]) -> list[str]:
    """Keys whose values the operations change, in first-seen order."""
    keys: list[str] = []
    for op in operations:
        if op.action is not ConfigAction.REMOVE_SECTION and op.key not in keys:
            keys.append(op.key)
    return keys


class ConfigBackup:
    """Save and restore repository-local config values.

    Args:
        git: Command runner
        cwd: Repository (or submodule) working tree; defaults to the runner's
    """

    _SAVED = "saved"
    _VALUE = "value"

    def __init__(self, git: "GitCommandManager", cwd: Path | str | None = None) -> None:
        self.git = git
        self.cwd = cwd

    def _backup_key(self, key: str, name: str) -> str:
        return f"{BACKUP_SECTION}.{key}.{name}"

    def saved_keys(self) -> list[str]:
        pairs = self.git.try_config_get_regexp(
            rf"^{BACKUP_SECTION}\..*\.{self._SAVED}$",
            cwd=self.cwd,
        )
        prefix = f"{BACKUP_SECTION}."
        suffix = f".{self._SAVED}"
        return [key[len(prefix):-len(suffix)] for key, _ in pairs]

    def save(self, keys: Iterable[str]) -> None:
        """Record the current values of ``keys``.

        Keys that already have a record keep it: the first snapshot is the
        state the agent was in before any checkout step touched it.
        """
        already = set(self.saved_keys())
        for key in keys:
            if key in already:
                continue
            values = self.git.try_config_get_all(key, cwd=self.cwd)
            self.git.config(self._backup_key(key, self._SAVED), "true", cwd=self.cwd)
            for value in values:
                self.git.config_add(self._backup_key(key, self._VALUE), value, cwd=self.cwd)
            already.add(key)

    def _drop_empty_section(self, key: str) -> None:
        """Remove the section of ``key`` once nothing is left in it.

        ``git config --unset-all`` keeps the section header, and for
        ``url.<prefix>.insteadOf`` the header is the authenticated URL.
        """
        section = key.rpartition(".")[0]
        name, _, subsection = section.partition(".")
        if not _SECTION_NAME_RE.match(name):
            return
        # git prints section names lower-cased and subsections verbatim.
        wanted = f"{name.lower()}.{subsection}" if subsection else name.lower()
        pairs = self.git.try_config_get_regexp(rf"^{name.lower()}\.", cwd=self.cwd)
        if any(k.rpartition(".")[0] == wanted for k, _ in pairs):
            return
        self.git.try_config_remove_section(section, cwd=self.cwd)

    def restore(self) -> list[str]:
        """Put every saved key back to its recorded values and drop the records.

        Returns:
            The restored keys
        """
        restored: list[str] = []
        for key in self.saved_keys():
            values = self.git.try_config_get_all(self._backup_key(key, self._VALUE), cwd=self.cwd)
            self.git.try_config_unset(key, cwd=self.cwd)
            for value in values:
                self.git.config_add(key, value, cwd=self.cwd)
            if not values:
                self._drop_empty_section(key)
            self.git.try_config_unset(self._backup_key(key, self._VALUE), cwd=self.cwd)
            self.git.try_config_unset(self._backup_key(key, self._SAVED), cwd=self.cwd)
            self.git.try_config_remove_section(f"{BACKUP_SECTION}.{key}", cwd=self.cwd)
            restored.append(key)
        return restored


__all__ = [
    "ConfigAction",
    "ConfigOperation",
    "ConfigBackup",
    "apply_operations",
    "touched_keys",
]
