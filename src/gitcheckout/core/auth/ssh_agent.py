"""Short-lived ssh-agent holding the checkout key."""
from __future__ import annotations

import logging
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

import psutil

from gitcheckout.core.constants import SSH_AGENT_PID, SSH_AUTH_SOCK
from gitcheckout.core.exceptions import SshAgentError
from gitcheckout.core.redaction import redact
from gitcheckout.core.templates import render_template, sh_quote_content

logger = logging.getLogger(__name__)

_AGENT_VAR_RE = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;\s]+)")


class SshAgent:
    """A running ssh-agent process.

    Args:
        auth_sock: Agent socket path
        pid: Agent process id
    """

    def __init__(self, auth_sock: str, pid: int, *, timeout: float = 60.0) -> None:
        self.auth_sock = auth_sock
        self.pid = pid
        self.timeout = timeout

    @property
    def environment(self) -> dict[str, str]:
        return {SSH_AUTH_SOCK: self.auth_sock, SSH_AGENT_PID: str(self.pid)}

    @classmethod
    def start(cls, *, timeout: float = 60.0) -> "SshAgent":
        """Start ``ssh-agent -s`` and parse its environment script.

        Raises:
            SshAgentError: If the agent cannot be started
        """
        try:
            proc = subprocess.run(
                ["ssh-agent", "-s"],
                capture_output=True,
                text=True,
                timeout=timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise SshAgentError(f"Unable to start ssh-agent: {e}") from e
        found = dict(_AGENT_VAR_RE.findall(proc.stdout))
        if SSH_AUTH_SOCK not in found or SSH_AGENT_PID not in found:
            raise SshAgentError("ssh-agent did not report SSH_AUTH_SOCK/SSH_AGENT_PID")
        agent = cls(found[SSH_AUTH_SOCK], int(found[SSH_AGENT_PID]), timeout=timeout)
        logger.info("Started ssh-agent pid=%s", agent.pid)
        return agent

    def add_identity(self, private_key: str, pass_phrase: Optional[str] = None) -> None:
        """Load ``private_key`` into the agent.

        The key is written to a 0600 temp file for the duration of ``ssh-add``;
        a passphrase is answered by a temporary ``SSH_ASKPASS`` script.

        Raises:
            SshAgentError: If ssh-add rejects the key
        """
        temp_files: list[Path] = []
        try:
            key_fd, key_name = tempfile.mkstemp(prefix="checkout_key_")
            temp_files.append(Path(key_name))
            with os.fdopen(key_fd, "w", encoding="utf-8") as fh:
                fh.write(private_key if private_key.endswith("\n") else private_key + "\n")
            os.chmod(key_name, 0o600)

            env = os.environ.copy()
            env.update(self.environment)
            if pass_phrase:
                ask_fd, ask_name = tempfile.mkstemp(prefix="ssh_askpass_", suffix=".sh")
                temp_files.append(Path(ask_name))
                with os.fdopen(ask_fd, "w", encoding="utf-8") as fh:
                    fh.write(render_template("ssh-askpass.sh.j2", pass_phrase=sh_quote_content(pass_phrase)))
                os.chmod(ask_name, 0o700)
                env.update({"SSH_ASKPASS": ask_name, "SSH_ASKPASS_REQUIRE": "force", "DISPLAY": env.get("DISPLAY", ":0")})

            proc = subprocess.run(
                ["ssh-add", key_name],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout,
                check=False,
            )
            if proc.returncode != 0:
                raise SshAgentError(f"ssh-add failed: {redact(proc.stderr.strip())}")
        except (OSError, subprocess.SubprocessError) as e:
            raise SshAgentError(f"Unable to add ssh identity: {e}") from e
        finally:
            for path in temp_files:
                path.unlink(missing_ok=True)

    def stop(self) -> None:
        """Terminate the agent process if it is still running.

        The pid may come from another process's record; a pid that was reused
        by something other than ssh-agent is left alone.
        """
        if not psutil.pid_exists(self.pid):
            return
        try:
            proc = psutil.Process(self.pid)
            if "ssh-agent" not in proc.name():
                logger.warning("pid %s is not an ssh-agent, not stopping it", self.pid)
                return
            proc.terminate()
            proc.wait(timeout=5)
        except psutil.NoSuchProcess:
            return
        except psutil.AccessDenied as e:
            logger.warning("Unable to stop ssh-agent pid=%s: %s", self.pid, e)
            return
        except psutil.TimeoutExpired:
            proc.kill()
        logger.info("Stopped ssh-agent pid=%s", self.pid)


__all__ = ["SshAgent"]
