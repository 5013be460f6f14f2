"""Temporary, isolated global git configuration for one checkout step.

Strategies that need global settings (URL rewrites, helper registration)
write them through HOME (and, on newer git, XDG_CONFIG_HOME) overrides that
point at a scratch configuration, so the agent's real ``~/.gitconfig`` is
left alone. :class:`GlobalScopeGuard` owns the overrides:

- enter: create the scratch home, route the rewrites, apply the strategy's
  global hooks, move the scratch config under XDG_CONFIG_HOME when git
  supports it.
- exit: drop the overrides, delete the scratch files and restore any real
  global rewrites that were taken out. Exit never raises.

Example:
    with GlobalScopeGuard(git, settings, helper, agent):
        helper.configure_main()
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from gitcheckout.core.auth.base import GitAuthHelper
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.constants import GIT_INSTEADOF_REGEX, HOME, XDG_CONFIG_HOME
from gitcheckout.core.exceptions import GitCheckoutError, GlobalScopeError
from gitcheckout.core.git.command import GitCommandManager, GitConfigScope
from gitcheckout.core.git.version import SUPPORT_XDG_CONFIG_HOME_GIT_VERSION

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "checkout"
GLOBAL_CONFIG_NAME = ".gitconfig"


def real_global_config_path() -> Path:
    return Path(os.environ.get(HOME) or Path.home()) / GLOBAL_CONFIG_NAME


class GlobalScopeGuard:
    """Context manager scoping a strategy's global configuration to one step.

    Args:
        git: Command runner whose environment overrides are managed
        settings: Checkout settings (pipeline/job ids, credential home, flags)
        helper: Strategy whose global hooks are applied
        agent: Build agent facts
    """

    def __init__(
        self,
        git: GitCommandManager,
        settings: GitSourceSettings,
        helper: GitAuthHelper,
        agent: Optional[AgentEnv] = None,
    ) -> None:
        self.git = git
        self.settings = settings
        self.helper = helper
        self.agent = agent or helper.agent
        self.scratch_home: Optional[Path] = None
        self.xdg_config_home: Optional[Path] = None
        self.saved_insteadof: list[tuple[str, str]] = []

    @property
    def global_rewrites_on_real_config(self) -> bool:
        return self.settings.enable_global_insteadof and self.agent.is_docker()

    @property
    def xdg_config_file(self) -> Optional[Path]:
        if self.xdg_config_home is None:
            return None
        return self.xdg_config_home / "git" / "config"

    def xdg_target_home(self) -> Path:
        """``<credential_home>/<pipeline_id>/<job_id>``; blank ids are skipped."""
        parts = [p for p in (self.settings.pipeline_id, self.settings.job_id) if p]
        return Path(self.settings.credential_home, *parts)

    # ----- enter -----
    def _create_scratch_home(self) -> Path:
        try:
            scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX))
            target = scratch / GLOBAL_CONFIG_NAME
            source = real_global_config_path()
            if self.helper.copy_global_config and source.is_file():
                shutil.copyfile(source, target)
            else:
                target.touch()
        except OSError as e:
            raise GlobalScopeError(f"Unable to create temporary git home: {e}") from e
        logger.debug("Created temporary git home %s", scratch)
        return scratch

    def _route_insteadof(self, scratch: Path) -> None:
        if self.global_rewrites_on_real_config:
            self.helper.unset_insteadof()
            self.helper.insteadof()
            self.git.set_environment_variable(HOME, str(scratch))
            return
        if self.agent.is_docker():
            self.saved_insteadof = self.git.try_config_get_regexp(GIT_INSTEADOF_REGEX, scope=GitConfigScope.GLOBAL)
            self.helper.unset_insteadof()
        self.git.set_environment_variable(HOME, str(scratch))
        self.helper.insteadof()

    def _move_to_xdg(self, scratch: Path) -> None:
        xdg_home = self.xdg_target_home()
        config_file = xdg_home / "git" / "config"
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(scratch / GLOBAL_CONFIG_NAME, config_file)
        except OSError as e:
            raise GlobalScopeError(f"Unable to create git config under {xdg_home}: {e}") from e
        self.xdg_config_home = xdg_home
        self.git.remove_environment_variable(HOME)
        shutil.rmtree(scratch, ignore_errors=True)
        self.scratch_home = None
        self.git.set_environment_variable(XDG_CONFIG_HOME, str(xdg_home))
        logger.debug("Using XDG_CONFIG_HOME=%s", xdg_home)

    def enter(self) -> "GlobalScopeGuard":
        """Create the isolated scope.

        Raises:
            GlobalScopeError: If the scratch configuration cannot be created
            GitCommandError: If a required global write fails
        """
        scratch = self._create_scratch_home()
        self.scratch_home = scratch
        try:
            self._route_insteadof(scratch)
            self.helper.configure_global_auth()
            if self.git.is_at_least_version(SUPPORT_XDG_CONFIG_HOME_GIT_VERSION):
                self._move_to_xdg(scratch)
        except BaseException:
            self.exit()
            raise
        return self

    # ----- exit -----
    def _remove_xdg(self) -> None:
        self.git.remove_environment_variable(XDG_CONFIG_HOME)
        config_file = self.xdg_config_file
        if config_file is None:
            return
        # The XDG home may be the shared credential home; only our file goes.
        try:
            config_file.unlink(missing_ok=True)
            config_dir = config_file.parent
            if config_dir.is_dir() and not any(config_dir.iterdir()):
                config_dir.rmdir()
        except OSError as e:
            logger.warning("Unable to delete %s: %s", config_file, e)
        self.xdg_config_home = None

    def _remove_scratch_home(self) -> None:
        self.git.remove_environment_variable(HOME)
        if self.scratch_home is None:
            return
        try:
            shutil.rmtree(self.scratch_home)
        except OSError as e:
            logger.warning("Unable to delete temporary git home %s: %s", self.scratch_home, e)
        self.scratch_home = None

    def _restore_insteadof(self) -> None:
        if self.global_rewrites_on_real_config or not self.agent.is_docker():
            return
        for key, value in self.saved_insteadof:
            try:
                if value in self.git.try_config_get_all(key, scope=GitConfigScope.GLOBAL):
                    continue
                self.git.config_add(key, value, scope=GitConfigScope.GLOBAL)
            except GitCheckoutError as e:
                logger.warning("Unable to restore global %s: %s", key, e)
        self.saved_insteadof = []

    def exit(self) -> None:
        """Tear the scope down; failures are logged, never raised."""
        self._remove_xdg()
        self._remove_scratch_home()
        self._restore_insteadof()

    def __enter__(self) -> "GlobalScopeGuard":
        return self.enter()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exit()


__all__ = ["GlobalScopeGuard", "real_global_config_path"]
