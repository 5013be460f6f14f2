"""Run git operations of a checkout step with credentials in place.

Typical use::

    git = GitCommandManager(settings.repository_path)
    with auth_session(git, settings) as helper:
        git.execute(["fetch", "origin"])

Everything configured on entry is removed on exit, on every exit path.
:func:`cleanup_auth` performs the same removal from a separate post-step
process, driven by the strategy tag recorded in the repository.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from gitcheckout.core.auth.base import GitAuthHelper
from gitcheckout.core.auth.factory import get_auth_helper, get_cleanup_auth_helper
from gitcheckout.core.auth.global_scope import GlobalScopeGuard
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.exceptions import GitCheckoutError
from gitcheckout.core.git.command import GitCommandManager

logger = logging.getLogger(__name__)


def remove_auth(helper: GitAuthHelper) -> None:
    """Remove submodule then main repository configuration, logging failures."""
    try:
        helper.remove_submodules()
    except GitCheckoutError as e:
        logger.warning("Failed to remove submodule auth: %s", e)
    try:
        helper.remove_main()
    except GitCheckoutError as e:
        logger.warning("Failed to remove auth: %s", e)


@contextmanager
def auth_session(
    git: GitCommandManager,
    settings: GitSourceSettings,
    agent: Optional[AgentEnv] = None,
    *,
    helper: Optional[GitAuthHelper] = None,
) -> Iterator[GitAuthHelper]:
    """Configure credentials for the body of the ``with`` block.

    Args:
        git: Command runner bound to the repository
        settings: Checkout settings
        agent: Build agent facts (defaults to the current environment)
        helper: Strategy to use instead of selecting one

    Yields:
        The active strategy

    Raises:
        ParamInvalidError: If required credentials are missing
        GlobalScopeError: If the isolated global scope cannot be created
    """
    agent = agent or AgentEnv.from_env()
    helper = helper or get_auth_helper(git, settings, agent)
    with GlobalScopeGuard(git, settings, helper, agent):
        try:
            helper.configure_main()
            helper.configure_submodules()
            yield helper
        finally:
            remove_auth(helper)


def cleanup_auth(
    git: GitCommandManager,
    settings: GitSourceSettings,
    agent: Optional[AgentEnv] = None,
) -> GitAuthHelper:
    """Undo a previous step's configuration of ``settings.repository_path``."""
    helper = get_cleanup_auth_helper(git, settings, agent or AgentEnv.from_env())
    logger.info("Removing %s credentials", helper.helper_type.value)
    remove_auth(helper)
    return helper


__all__ = ["auth_session", "cleanup_auth", "remove_auth"]
