"""ASK_PASS strategy: a throw-away script answers git's credential prompts."""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Optional

from gitcheckout.core.auth.base import remove_file
from gitcheckout.core.auth.http import HttpAuthHelper
from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.constants import GIT_ASKPASS, GIT_CORE_ASKPASS, GIT_CREDENTIAL_HELPER
from gitcheckout.core.git.command import GitConfigScope
from gitcheckout.core.git.config_ops import ConfigOperation
from gitcheckout.core.templates import render_template, sh_quote_content

logger = logging.getLogger(__name__)

ASKPASS_PREFIX = "pass_"


class AskPassAuthHelper(HttpAuthHelper):
    """Register a single-use ``core.askpass`` script.

    Chosen when a foreign credential helper is already registered globally,
    so that helper is left alone.
    """

    helper_type = AuthHelperType.ASK_PASS
    copy_global_config = True

    _askpass_path: Optional[str] = None

    def render_script(self) -> tuple[str, str]:
        """Return ``(suffix, content)`` of the askpass script for this OS."""
        username = self.auth_info.username or ""
        password = self.auth_info.password or ""
        if self.agent.is_windows():
            return ".bat", render_template(
                "askpass.bat.j2", newline="\r\n", username=username, password=password
            )
        return ".sh", render_template(
            "askpass.sh.j2",
            username=sh_quote_content(username),
            password=sh_quote_content(password),
        )

    def prepare(self) -> None:
        logger.info("using askpass to set credentials %s/******", self.auth_info.username)
        suffix, content = self.render_script()
        # A second configure replaces the script written by the first.
        remove_file(self._askpass_path)
        fd, path = tempfile.mkstemp(prefix=ASKPASS_PREFIX, suffix=suffix)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.chmod(path, 0o700)
        self._askpass_path = path
        self.git.set_environment_variable(GIT_ASKPASS, path)
        self.store_global_credential()

    def credential_operations(self) -> list[ConfigOperation]:
        if not self._askpass_path:
            return []
        return [ConfigOperation.set(GIT_CORE_ASKPASS, self._askpass_path)]

    def configure_global_auth(self) -> None:
        # The scratch config starts as a copy of the real one; keep its
        # helpers from answering before the askpass script.
        self.git.try_config_unset(GIT_CREDENTIAL_HELPER, scope=GitConfigScope.GLOBAL)

    def cleanup(self) -> None:
        path = self.git.try_config_get(GIT_CORE_ASKPASS) or self._askpass_path
        if path and os.path.basename(path).startswith(ASKPASS_PREFIX):
            remove_file(path)
        self.git.remove_environment_variable(GIT_ASKPASS)
        self._askpass_path = None


__all__ = ["AskPassAuthHelper"]
