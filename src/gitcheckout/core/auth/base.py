"""Common contract and shared machinery of the credential strategies.

A strategy configures the main repository, replays an equivalent local
configuration into every submodule that shares a host with it, and undoes
both. Local keys are snapshotted with :class:`ConfigBackup` before they are
changed, so removal restores the previous values exactly, even from a
separate cleanup process.

Global configuration (URL rewrites, helper registration) is only written
through the hooks :meth:`GitAuthHelper.insteadof`,
:meth:`GitAuthHelper.unset_insteadof` and
:meth:`GitAuthHelper.configure_global_auth`, which the global scope guard
calls while HOME/XDG_CONFIG_HOME point at a scratch configuration.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Iterator, Optional

from gitcheckout.core.auth.hosts import iter_protocol_hosts, resolve_host_set
from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.constants import GIT_CREDENTIAL_AUTH_HELPER, GIT_CREDENTIAL_HELPER, HTTP_PROTOCOLS, OAUTH2
from gitcheckout.core.credential.protocol import CredentialArguments
from gitcheckout.core.exceptions import GitCheckoutError, ParamInvalidError
from gitcheckout.core.git.command import GitCommandManager, GitConfigScope
from gitcheckout.core.git.config_ops import ConfigBackup, ConfigOperation, apply_operations, touched_keys
from gitcheckout.core.git.server_info import SSH_SCHEME, ServerInfo, get_server_info
from gitcheckout.core.git.submodules import Submodule, get_submodules
from gitcheckout.core.git.version import SUPPORT_EMPTY_CRED_HELPER_GIT_VERSION

logger = logging.getLogger(__name__)


def url_prefix(info: ServerInfo) -> str:
    """URL prefix used on either side of an ``insteadOf`` rewrite."""
    if info.http_protocol:
        return f"{info.origin}/"
    return f"{SSH_SCHEME}{info.host_name}:"


class GitAuthHelper(ABC):
    """Base class of every credential-delivery strategy.

    Args:
        git: Command runner bound to the main repository
        settings: Checkout settings
        agent: Build agent facts (defaults to the current environment)
    """

    helper_type: ClassVar[AuthHelperType]
    # Seed the scratch global config with the agent's real ~/.gitconfig.
    copy_global_config: ClassVar[bool] = False

    def __init__(
        self,
        git: GitCommandManager,
        settings: GitSourceSettings,
        agent: Optional[AgentEnv] = None,
    ) -> None:
        self.git = git
        self.settings = settings
        self.agent = agent or AgentEnv.from_env()
        self.server_info = get_server_info(settings.repository_url)
        self.auth_info = settings.auth_info
        self.host_set = resolve_host_set(self.server_info, settings.compatible_hosts)

    # ----- Hooks implemented by the variants -----
    def should_configure(self) -> bool:
        """Whether there is anything to configure (credentials present)."""
        return self.auth_info.has_username_password

    def prepare(self) -> None:
        """Side effects needed before local config is written (files, agents, env)."""

    @abstractmethod
    def main_operations(self) -> list[ConfigOperation]:
        """Local config operations for the main repository."""

    def submodule_operations(self, module_info: ServerInfo) -> list[ConfigOperation]:
        """Local config operations replayed into a matching submodule."""
        return []

    def cleanup(self) -> None:
        """Remove non-config artifacts; runs before local config is restored."""

    def configure_global_auth(self) -> None:
        """Write helper registration into the (scratch) global config."""

    # ----- URL rewriting -----
    def rewrite_target(self) -> str:
        """Prefix every rewritten URL is mapped onto."""
        return url_prefix(self.server_info)

    def rewrite_sources(self) -> list[str]:
        """Prefixes of every alias URL form that must reach :meth:`rewrite_target`."""
        target = self.rewrite_target()
        sources: list[str] = []
        for host in sorted(self.host_set):
            candidates = [f"{SSH_SCHEME}{host}:"] + [f"{proto}://{host}/" for proto in HTTP_PROTOCOLS]
            sources.extend(c for c in candidates if c != target and c not in sources)
        return sources

    def insteadof_key(self) -> str:
        return f"url.{self.rewrite_target()}.insteadOf"

    def insteadof_operations(self) -> list[ConfigOperation]:
        key = self.insteadof_key()
        return [ConfigOperation.unset(key), *(ConfigOperation.add(key, src) for src in self.rewrite_sources())]

    def rewrites_submodule(self, module_info: ServerInfo) -> bool:
        """Whether a submodule needs our rewrites to reach the main origin."""
        return module_info.origin != self.server_info.origin

    def insteadof(self) -> None:
        """Write our rewrites into the current global scope."""
        apply_operations(self.git, self.insteadof_operations(), scope=GitConfigScope.GLOBAL)

    def unset_insteadof(self) -> None:
        """Remove global rewrites that would loop against ours."""
        for source in self.rewrite_sources():
            self.git.try_config_unset(f"url.{source}.insteadof", scope=GitConfigScope.GLOBAL)

    # ----- Shared credential plumbing -----
    def supports_empty_helper(self) -> bool:
        return self.git.is_at_least_version(SUPPORT_EMPTY_CRED_HELPER_GIT_VERSION)

    def disable_helpers_operations(self) -> list[ConfigOperation]:
        """Drop inherited credential helpers for this repository."""
        ops = [ConfigOperation.unset(GIT_CREDENTIAL_HELPER)]
        if self.supports_empty_helper():
            ops.append(ConfigOperation.add(GIT_CREDENTIAL_HELPER, ""))
        return ops

    def iter_credential_arguments(self, *, with_secret: bool = True) -> Iterator[CredentialArguments]:
        for protocol, host in iter_protocol_hosts(self.host_set):
            yield CredentialArguments(
                protocol=protocol,
                host=host,
                username=self.auth_info.username,
                password=self.auth_info.password if with_secret else None,
            )

    def store_global_credential(self) -> None:
        """Hand the credential to the agent's own helpers (best-effort)."""
        for arguments in self.iter_credential_arguments():
            self.git.credential("approve", arguments.to_input())

    def erase_oauth2_credential(self) -> None:
        """Forget cached ``oauth2`` credentials that may shadow the new token."""
        if self.auth_info.username != OAUTH2:
            return
        logger.info("Removing global credential for `oauth2` username")
        for protocol, host in iter_protocol_hosts(self.host_set):
            arguments = CredentialArguments(protocol=protocol, host=host, username=OAUTH2)
            self.git.credential("reject", arguments.to_input())

    # ----- Main repository -----
    def configure_main(self) -> None:
        """Apply credentials to the main repository.

        Raises:
            ParamInvalidError: When required secret material is missing
            GitCommandError: When a required config write fails
        """
        if not self.should_configure():
            logger.info("No credentials for %s, skipping %s", self.server_info.host_name, self.helper_type.value)
            return
        self.prepare()
        operations = [ConfigOperation.set(GIT_CREDENTIAL_AUTH_HELPER, self.helper_type.value)]
        operations.extend(self.main_operations())
        ConfigBackup(self.git).save(touched_keys(operations))
        for op in operations:
            op.apply(self.git)

    def remove_main(self) -> None:
        """Undo :meth:`configure_main`; a no-op when nothing was configured."""
        self.cleanup()
        restored = ConfigBackup(self.git).restore()
        if restored:
            logger.debug("Restored local config keys: %s", ", ".join(restored))

    # ----- Submodules -----
    def _iter_submodules(self) -> list[Submodule]:
        if not self.settings.submodules:
            return []
        try:
            return get_submodules(
                self.git,
                self.settings.repository_path,
                recursive=self.settings.nested_submodules,
            )
        except GitCheckoutError as e:
            logger.warning("Unable to enumerate submodules: %s", e)
            return []

    def _matching_submodules(self) -> Iterator[tuple[Submodule, ServerInfo]]:
        for submodule in self._iter_submodules():
            try:
                module_info = get_server_info(submodule.url)
            except ParamInvalidError:
                logger.debug("Skipping submodule %s with unrecognized url", submodule.name)
                continue
            if module_info.host_name in self.host_set and submodule.initialized:
                yield submodule, module_info

    def configure_submodules(self) -> None:
        """Replay the configuration into every submodule on a matching host."""
        if not self.should_configure():
            return
        for submodule, module_info in self._matching_submodules():
            try:
                operations = self.submodule_operations(module_info)
                if self.rewrites_submodule(module_info):
                    operations.extend(self.insteadof_operations())
                if not operations:
                    continue
                ConfigBackup(self.git, submodule.absolute_path).save(touched_keys(operations))
                failures = apply_operations(self.git, operations, cwd=submodule.absolute_path)
                if failures:
                    logger.debug("%d config operations failed for submodule %s", failures, submodule.name)
            except GitCheckoutError as e:
                logger.warning("Failed to configure auth for submodule %s: %s", submodule.name, e)

    def remove_submodules(self) -> None:
        """Restore every submodule's local config."""
        for submodule in self._iter_submodules():
            if not submodule.initialized:
                continue
            try:
                ConfigBackup(self.git, submodule.absolute_path).restore()
            except GitCheckoutError as e:
                logger.warning("Failed to remove auth for submodule %s: %s", submodule.name, e)

    def describe(self) -> dict[str, object]:
        return {
            "helper": self.helper_type.value,
            "server": self.server_info.to_dict(),
            "hosts": sorted(self.host_set),
        }


def remove_file(path: Optional[str | Path]) -> None:
    """Delete a helper file, logging instead of raising."""
    if not path:
        return
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Unable to delete %s: %s", path, e)


__all__ = ["GitAuthHelper", "remove_file", "url_prefix"]
