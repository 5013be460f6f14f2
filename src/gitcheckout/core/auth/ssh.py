"""SSH strategy: load the private key into a step-scoped ssh-agent."""
from __future__ import annotations

import logging
from typing import Optional

from gitcheckout.core.auth.base import GitAuthHelper
from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.auth.ssh_agent import SshAgent
from gitcheckout.core.constants import (
    CHECKOUT_SSH_AGENT_PID,
    CHECKOUT_SSH_AUTH_SOCK,
    GIT_SSH_COMMAND,
    GIT_SSH_COMMAND_VALUE,
    SSH_AGENT_PID,
    SSH_AUTH_SOCK,
)
from gitcheckout.core.exceptions import ParamInvalidError
from gitcheckout.core.git.config_ops import ConfigOperation

logger = logging.getLogger(__name__)


class SshAuthHelper(GitAuthHelper):
    """Authenticate through an agent exported to every git invocation.

    The agent's pid and socket are recorded in the main repository's local
    config so that a cleanup step in another process can stop it; submodules
    on another protocol are rewritten onto ``git@host:``.
    """

    helper_type = AuthHelperType.SSH

    _agent: Optional[SshAgent] = None

    def should_configure(self) -> bool:
        """Raises ParamInvalidError when no private key was supplied."""
        if not (self.auth_info.private_key or "").strip():
            raise ParamInvalidError(
                "SSH private key is required for ssh repositories",
                context={"host": self.server_info.host_name},
            )
        return True

    def prepare(self) -> None:
        logger.info("using ssh private key to set credentials")
        if self._agent is not None:
            self._agent.stop()
        agent = SshAgent.start(timeout=self.settings.git_timeout_seconds)
        self._agent = agent
        agent.add_identity(self.auth_info.private_key or "", self.auth_info.pass_phrase)
        for name, value in agent.environment.items():
            self.git.set_environment_variable(name, value)
        self.git.set_environment_variable(GIT_SSH_COMMAND, GIT_SSH_COMMAND_VALUE)

    def main_operations(self) -> list[ConfigOperation]:
        if self._agent is None:
            return []
        return [
            ConfigOperation.set(CHECKOUT_SSH_AGENT_PID, str(self._agent.pid)),
            ConfigOperation.set(CHECKOUT_SSH_AUTH_SOCK, self._agent.auth_sock),
        ]

    def recorded_agent(self) -> Optional[SshAgent]:
        """The agent a previous configure recorded in local config, if any."""
        pid = self.git.try_config_get(CHECKOUT_SSH_AGENT_PID)
        if not pid:
            return None
        try:
            return SshAgent(
                self.git.try_config_get(CHECKOUT_SSH_AUTH_SOCK),
                int(pid),
                timeout=self.settings.git_timeout_seconds,
            )
        except ValueError:
            logger.warning("Ignoring malformed %s value %r", CHECKOUT_SSH_AGENT_PID, pid)
            return None

    def cleanup(self) -> None:
        agent = self._agent or self.recorded_agent()
        if agent is not None:
            agent.stop()
        self._agent = None
        for name in (SSH_AUTH_SOCK, SSH_AGENT_PID, GIT_SSH_COMMAND):
            self.git.remove_environment_variable(name)


__all__ = ["SshAuthHelper"]
