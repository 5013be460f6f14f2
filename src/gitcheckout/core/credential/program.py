"""Entry point of the ``git-checkout-credential`` helper.

git invokes the helper as ``<wrapper> [task_id] <action>`` with a credential
record on stdin. Actions:

- ``get`` / ``fill``: print the credential for the requested host. The
  per-task credential wins over the step default, and nothing is printed for
  hosts the stored credential was not issued for.
- ``store`` / ``devopsStore``: persist the record as the step default and,
  when a task id is given, as that task's credential.
- ``erase`` / ``devopsErase``: delete the default and the task's credential.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import IO, Callable, Mapping, Optional, Sequence

from gitcheckout.core.constants import CREDENTIAL_STORE_ENV, CREDENTIAL_STORE_FILE_NAME, DEVOPS_URI, task_uri
from gitcheckout.core.credential.protocol import CredentialArguments, format_credential
from gitcheckout.core.credential.store import Credential, CredentialStore
from gitcheckout.core.exceptions import CredentialInputError, CredentialStoreError

logger = logging.getLogger(__name__)


def default_store_path(env: Optional[Mapping[str, str]] = None) -> Path:
    source = os.environ if env is None else env
    configured = source.get(CREDENTIAL_STORE_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path("~/.checkout").expanduser() / CREDENTIAL_STORE_FILE_NAME


class CredentialProgram:
    """Dispatch helper actions against a :class:`CredentialStore`."""

    def __init__(self, stdin: IO[str], stdout: IO[str], store: CredentialStore) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.store = store
        self.task_id: Optional[str] = None

    def run(self, args: Sequence[str]) -> None:
        """Run every recognized action named in ``args``.

        Raises:
            CredentialInputError: If the stdin record lacks protocol or host
        """
        if not args or "?" in args[0]:
            return
        actions: dict[str, Callable[[], None]] = {
            "get": self.get,
            "fill": self.get,
            "store": self.save,
            "devopsStore": self.save,
            "erase": self.erase,
            "devopsErase": self.erase,
        }
        if len(args) >= 2:
            self.task_id = args[0]
        for arg in args:
            action = actions.get(arg)
            if action is not None:
                action()

    def _read_input(self) -> CredentialArguments:
        return CredentialArguments.parse(self.stdin)

    def save(self) -> None:
        record = self._read_input()
        credential = Credential(
            username=record.username or "",
            password=record.password or "",
            hosts=(record.host,),
        )
        self.store.add(DEVOPS_URI, credential)
        if self.task_id:
            self.store.add(task_uri(self.task_id), credential)

    def get(self) -> None:
        record = self._read_input()
        credential = None
        if self.task_id:
            credential = self.store.get(task_uri(self.task_id))
        if credential is None:
            credential = self.store.get(DEVOPS_URI)
        if credential is None or record.host not in credential.hosts:
            logger.debug("No trusted credential for host %s", record.host)
            return
        self.stdout.write(format_credential(credential.username, credential.password))

    def erase(self) -> None:
        self._read_input()
        self.store.delete(DEVOPS_URI)
        if self.task_id:
            self.store.delete(task_uri(self.task_id))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Process entry point; returns the exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    program = CredentialProgram(sys.stdin, sys.stdout, CredentialStore(default_store_path()))
    try:
        program.run(args)
    except (CredentialInputError, CredentialStoreError) as e:
        print(f"git-checkout-credential: {e}", file=sys.stderr)
        return 1
    return 0


__all__ = ["CredentialProgram", "default_store_path", "main"]
