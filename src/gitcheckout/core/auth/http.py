"""Shared behaviour of the credential-helper based HTTP strategies."""
from __future__ import annotations

from abc import abstractmethod

from gitcheckout.core.auth.base import GitAuthHelper
from gitcheckout.core.git.config_ops import ConfigOperation
from gitcheckout.core.git.server_info import ServerInfo


class HttpAuthHelper(GitAuthHelper):
    """Strategies that hand git credentials through helper configuration.

    The main repository and every matching submodule get the same list:
    inherited helpers are disabled first, then the variant's own settings
    are applied.
    """

    @abstractmethod
    def credential_operations(self) -> list[ConfigOperation]:
        """Variant-specific local settings (helper, askpass, task id)."""

    def main_operations(self) -> list[ConfigOperation]:
        return [*self.disable_helpers_operations(), *self.credential_operations()]

    def submodule_operations(self, module_info: ServerInfo) -> list[ConfigOperation]:
        return [*self.disable_helpers_operations(), *self.credential_operations()]


__all__ = ["HttpAuthHelper"]
