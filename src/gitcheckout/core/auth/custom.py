"""CUSTOM_CREDENTIAL strategy: the bundled ``git-checkout-credential`` helper.

The helper is installed once per agent under ``credential_home`` and
registered in the agent's real global configuration, where it stays between
builds. Each step stores its credential twice in the helper's store: under
:data:`DEVOPS_URI` (the default for the agent) and under the step's own task
URI, which the helper prefers when the repository carries
``credential.taskId``.
"""
from __future__ import annotations

import logging
from typing import Optional

from gitcheckout.core.auth.http import HttpAuthHelper
from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.constants import (
    DEVOPS_URI,
    GIT_CREDENTIAL_HELPER,
    GIT_CREDENTIAL_HELPER_VALUE_REGEX,
    GIT_CREDENTIAL_TASKID,
    task_uri,
)
from gitcheckout.core.credential.installer import CredentialInstaller
from gitcheckout.core.credential.store import Credential, CredentialStore
from gitcheckout.core.git.command import GitCommandManager, GitConfigScope
from gitcheckout.core.git.config_ops import ConfigOperation

logger = logging.getLogger(__name__)


class CustomCredentialAuthHelper(HttpAuthHelper):
    """Serve credentials from the bundled helper's store."""

    helper_type = AuthHelperType.CUSTOM_CREDENTIAL

    def __init__(
        self,
        git: GitCommandManager,
        settings: GitSourceSettings,
        agent: Optional[AgentEnv] = None,
    ) -> None:
        super().__init__(git, settings, agent)
        self.installer = CredentialInstaller(self.settings.credential_home)
        self.store = CredentialStore(self.installer.store_path)

    def store_keys(self, task_id: str) -> list[str]:
        keys = [DEVOPS_URI]
        if task_id:
            keys.append(task_uri(task_id))
        return keys

    def register_global_helper(self) -> None:
        """Add the wrapper to the real global ``credential.helper`` list once."""
        if self.git.config_exists(
            GIT_CREDENTIAL_HELPER,
            GIT_CREDENTIAL_HELPER_VALUE_REGEX,
            scope=GitConfigScope.GLOBAL,
            bypass_overrides=True,
        ):
            return
        logger.info("Registering %s as global credential helper", self.installer.wrapper_path)
        self.git.config_add(
            GIT_CREDENTIAL_HELPER,
            self.installer.helper_command,
            scope=GitConfigScope.GLOBAL,
            bypass_overrides=True,
        )

    def prepare(self) -> None:
        logger.info("using custom credential helper to set credentials %s/******", self.auth_info.username)
        self.erase_oauth2_credential()
        self.installer.install()
        self.register_global_helper()
        credential = Credential(
            username=self.auth_info.username or "",
            password=self.auth_info.password or "",
            hosts=tuple(sorted(self.host_set)),
        )
        for key in self.store_keys(self.settings.task_id):
            self.store.add(key, credential)

    def credential_operations(self) -> list[ConfigOperation]:
        ops: list[ConfigOperation] = []
        if self.settings.task_id:
            ops.append(ConfigOperation.set(GIT_CREDENTIAL_TASKID, self.settings.task_id))
        ops.append(ConfigOperation.add(GIT_CREDENTIAL_HELPER, self.installer.helper_command))
        return ops

    def cleanup(self) -> None:
        if not self.store.path.exists():
            return
        task_id = self.git.try_config_get(GIT_CREDENTIAL_TASKID) or self.settings.task_id
        for key in self.store_keys(task_id):
            self.store.delete(key)


__all__ = ["CustomCredentialAuthHelper"]
