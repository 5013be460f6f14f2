"""Install the credential helper into the per-user credential home.

Two files are written:

- ``git-checkout-credential-<version>.py``: the launcher. Versioned, so it
  is only written when missing.
- ``git-checkout-credential.sh``: the wrapper git calls. Rendered on every
  install and replaced when its MD5 differs from the rendered content, which
  lets an interrupted or outdated install converge on the next step.
"""
from __future__ import annotations

import hashlib
import logging
import os
import sys
from pathlib import Path

from gitcheckout import __version__
from gitcheckout.core.constants import (
    CREDENTIAL_SHELL_FILE_NAME,
    CREDENTIAL_STORE_ENV,
    CREDENTIAL_STORE_FILE_NAME,
    GIT_CREDENTIAL_TASKID,
)
from gitcheckout.core.templates import render_template

logger = logging.getLogger(__name__)


def _md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class CredentialInstaller:
    """Write the launcher and wrapper scripts.

    Args:
        credential_home: Directory holding the helper files (``~/.checkout``)
        version: Helper version baked into the launcher name
        python_executable: Interpreter that runs the launcher
    """

    def __init__(
        self,
        credential_home: Path,
        *,
        version: str = __version__,
        python_executable: str | None = None,
    ) -> None:
        self.credential_home = Path(credential_home)
        self.version = version
        self.python_executable = python_executable or sys.executable

    @property
    def launcher_path(self) -> Path:
        return self.credential_home / f"git-checkout-credential-{self.version}.py"

    @property
    def wrapper_path(self) -> Path:
        return self.credential_home / CREDENTIAL_SHELL_FILE_NAME

    @property
    def store_path(self) -> Path:
        return self.credential_home / CREDENTIAL_STORE_FILE_NAME

    @property
    def helper_command(self) -> str:
        """Value registered as ``credential.helper``."""
        return f"!bash '{self.wrapper_path}'"

    def render_launcher(self) -> str:
        return render_template(
            "credential-launcher.py.j2",
            python=self.python_executable,
            version=self.version,
        )

    def render_wrapper(self) -> str:
        return render_template(
            "credential-wrapper.sh.j2",
            version=self.version,
            python=self.python_executable,
            launcher=self.launcher_path,
            store_env=CREDENTIAL_STORE_ENV,
            store_path=self.store_path,
            task_key=GIT_CREDENTIAL_TASKID,
        )

    def install(self) -> bool:
        """Install or repair the helper files.

        Returns:
            True when any file was (re)written
        """
        self.credential_home.mkdir(parents=True, exist_ok=True)
        changed = False

        if not self.launcher_path.exists():
            self.launcher_path.write_text(self.render_launcher(), encoding="utf-8")
            os.chmod(self.launcher_path, 0o755)
            logger.info("Installed credential program %s", self.launcher_path)
            changed = True

        rendered = self.render_wrapper().encode("utf-8")
        if self.wrapper_path.exists():
            current = self.wrapper_path.read_bytes()
            if _md5_hex(current) == _md5_hex(rendered):
                return changed
            logger.info("Credential wrapper %s is outdated, replacing it", self.wrapper_path)
            self.wrapper_path.unlink()
        self.wrapper_path.write_bytes(rendered)
        os.chmod(self.wrapper_path, 0o755)
        return True


__all__ = ["CredentialInstaller"]
