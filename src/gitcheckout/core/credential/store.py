"""File-backed credential store for the custom credential helper.

Credentials are kept in a single JSON document keyed by pseudo-URI
(``https://mock.devops.com`` for the step default and
``https://<task>.mock.devops.com`` per task). The file is created with
mode 0600 and every read-modify-write runs under an exclusive ``flock`` on a
sidecar ``.lock`` file, since several pipeline steps on one agent share it.
"""
from __future__ import annotations

import errno
import fcntl
import json
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

from gitcheckout.core.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.05


@dataclass(frozen=True, slots=True)
class Credential:
    """A username/secret pair plus the hosts it may be handed to."""

    username: str
    password: str = field(repr=False)
    hosts: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        return cls(
            username=str(data.get("username") or ""),
            password=str(data.get("password") or ""),
            hosts=tuple(str(h) for h in data.get("hosts") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "password": self.password, "hosts": list(self.hosts)}


@contextmanager
def acquire_file_lock(file_path: Path, timeout: float = 10.0) -> Iterator[None]:
    """Hold an exclusive lock on ``<file_path>.lock``.

    Raises:
        CredentialStoreError: If the lock is not obtained within ``timeout``
    """
    lock_path = file_path.with_suffix(file_path.suffix + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with open(lock_path, "a+") as fh:
        while True:
            try:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError as e:
                if e.errno not in (errno.EAGAIN, errno.EACCES):
                    raise CredentialStoreError(f"Unable to lock {lock_path}: {e}") from e
                if time.monotonic() >= deadline:
                    raise CredentialStoreError(f"Timed out waiting for lock {lock_path}") from e
                time.sleep(_POLL_INTERVAL_SECONDS)
        try:
            yield
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


class CredentialStore:
    """Read and write credentials in a JSON file.

    Args:
        path: Store file location
        lock_timeout: Seconds to wait for the store lock
    """

    def __init__(self, path: Path | str, *, lock_timeout: float = 10.0) -> None:
        self.path = Path(path)
        self.lock_timeout = lock_timeout

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialStoreError(f"Unable to read credential store {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".credentials-", dir=str(self.path.parent))
        try:
            os.fchmod(fd, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise CredentialStoreError(f"Unable to write credential store {self.path}: {e}") from e

    def add(self, uri: str, credential: Credential) -> None:
        with acquire_file_lock(self.path, self.lock_timeout):
            data = self._read()
            data[uri] = credential.to_dict()
            self._write(data)
        logger.debug("Stored credential for %s", uri)

    def get(self, uri: str) -> Optional[Credential]:
        with acquire_file_lock(self.path, self.lock_timeout):
            entry = self._read().get(uri)
        return Credential.from_dict(entry) if entry else None

    def delete(self, uri: str) -> bool:
        with acquire_file_lock(self.path, self.lock_timeout):
            data = self._read()
            if uri not in data:
                return False
            del data[uri]
            self._write(data)
        logger.debug("Deleted credential for %s", uri)
        return True


__all__ = ["Credential", "CredentialStore", "acquire_file_lock"]
