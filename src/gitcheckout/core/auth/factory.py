"""Choose the credential strategy for a checkout step.

Selection is a pure function of a few observed facts so it can be tested as a
table; :func:`get_auth_helper` gathers them. Cleanup never re-inspects: the
strategy that configured a repository records itself in
``checkout.authHelper`` and :func:`get_cleanup_auth_helper` rebuilds that
same strategy from the tag.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from gitcheckout.core.auth.askpass import AskPassAuthHelper
from gitcheckout.core.auth.base import GitAuthHelper
from gitcheckout.core.auth.custom import CustomCredentialAuthHelper
from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.auth.ssh import SshAuthHelper
from gitcheckout.core.auth.store import CredentialStoreAuthHelper
from gitcheckout.core.auth.username_password import UsernamePasswordAuthHelper
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.constants import (
    GIT_CREDENTIAL_AUTH_HELPER,
    GIT_CREDENTIAL_HELPER,
    GIT_CREDENTIAL_HELPER_VALUE_REGEX,
)
from gitcheckout.core.git.command import GitCommandManager, GitConfigScope
from gitcheckout.core.git.server_info import ServerInfo, get_server_info
from gitcheckout.core.git.version import SUPPORT_CRED_HELPER_GIT_VERSION, GitVersion

logger = logging.getLogger(__name__)

_HELPERS: dict[AuthHelperType, type[GitAuthHelper]] = {
    AuthHelperType.ASK_PASS: AskPassAuthHelper,
    AuthHelperType.STORE_CREDENTIAL: CredentialStoreAuthHelper,
    AuthHelperType.CUSTOM_CREDENTIAL: CustomCredentialAuthHelper,
    AuthHelperType.USERNAME_PASSWORD: UsernamePasswordAuthHelper,
    AuthHelperType.SSH: SshAuthHelper,
}


def _custom_credential_permitted(
    global_credential_helpers: Sequence[str],
    is_third_party_agent: bool,
    home_present: bool,
    use_custom_credential: bool,
) -> bool:
    helpers = [h for h in global_credential_helpers if h]
    helper_allows = (
        not helpers
        or any(GIT_CREDENTIAL_HELPER_VALUE_REGEX in h for h in helpers)
        or use_custom_credential
    )
    # Third-party agents without HOME cannot host the per-user helper files.
    return helper_allows and (home_present or not is_third_party_agent)


def select_strategy(
    git_version: GitVersion,
    global_credential_helpers: Sequence[str],
    is_third_party_agent: bool,
    server_info: ServerInfo,
    *,
    home_present: bool = True,
    use_custom_credential: bool = False,
) -> AuthHelperType:
    """Pick a strategy; the first matching rule wins.

    1. Non-HTTP remotes use SSH.
    2. Git without credential helpers uses USERNAME_PASSWORD.
    3. CUSTOM_CREDENTIAL when no foreign global helper would compete with
       it (or the caller asked for it) and the agent can host its files.
    4. ASK_PASS otherwise, leaving the foreign helper untouched.

    Args:
        git_version: Installed git version
        global_credential_helpers: Values of the global ``credential.helper``
        is_third_party_agent: Whether the agent is a user-provided one
        server_info: Classified main repository URL
        home_present: Whether HOME is set for the step
        use_custom_credential: Force the bundled helper over a foreign one

    Returns:
        AuthHelperType
    """
    if not server_info.http_protocol:
        return AuthHelperType.SSH
    if git_version < SUPPORT_CRED_HELPER_GIT_VERSION:
        return AuthHelperType.USERNAME_PASSWORD
    if _custom_credential_permitted(
        global_credential_helpers, is_third_party_agent, home_present, use_custom_credential
    ):
        return AuthHelperType.CUSTOM_CREDENTIAL
    return AuthHelperType.ASK_PASS


def create_auth_helper(
    helper_type: AuthHelperType,
    git: GitCommandManager,
    settings: GitSourceSettings,
    agent: Optional[AgentEnv] = None,
) -> GitAuthHelper:
    return _HELPERS[helper_type](git, settings, agent)


def get_auth_helper(
    git: GitCommandManager,
    settings: GitSourceSettings,
    agent: Optional[AgentEnv] = None,
) -> GitAuthHelper:
    """Inspect the agent and build the strategy for a fresh checkout.

    An explicit ``auth_helper`` in the settings bypasses selection.

    Raises:
        ParamInvalidError: If the repository URL cannot be classified
        GitCommandError: If git is missing or its version cannot be read
    """
    agent = agent or AgentEnv.from_env()
    if settings.auth_helper is not None:
        logger.info("Using configured auth helper %s", settings.auth_helper.value)
        return create_auth_helper(settings.auth_helper, git, settings, agent)

    server_info = get_server_info(settings.repository_url)
    helpers = git.try_config_get_all(GIT_CREDENTIAL_HELPER, scope=GitConfigScope.GLOBAL)
    helper_type = select_strategy(
        git.version(),
        helpers,
        agent.is_third_party(),
        server_info,
        home_present=agent.home_present,
        use_custom_credential=settings.use_custom_credential,
    )
    logger.info("Selected auth helper %s for %s", helper_type.value, server_info.host_name)
    return create_auth_helper(helper_type, git, settings, agent)


def get_cleanup_auth_helper(
    git: GitCommandManager,
    settings: GitSourceSettings,
    agent: Optional[AgentEnv] = None,
) -> GitAuthHelper:
    """Rebuild the strategy recorded in the repository, or select a new one."""
    tag = git.try_config_get(GIT_CREDENTIAL_AUTH_HELPER)
    helper_type = AuthHelperType.from_value(tag)
    if helper_type is None:
        if tag:
            logger.warning("Unknown auth helper marker %r, selecting again", tag)
        return get_auth_helper(git, settings, agent)
    logger.debug("Cleaning up with recorded auth helper %s", helper_type.value)
    return create_auth_helper(helper_type, git, settings, agent)


__all__ = [
    "create_auth_helper",
    "get_auth_helper",
    "get_cleanup_auth_helper",
    "select_strategy",
]
