"""Git credential wire format.

Records are ``key=value`` lines terminated by a blank line (or end of input).
Recognized keys are ``protocol``, ``host``, ``path``, ``username`` and
``password``; anything else is ignored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Iterable, Optional

from gitcheckout.core.exceptions import CredentialInputError

_FIELDS = ("protocol", "host", "path", "username", "password")


@dataclass(frozen=True, slots=True)
class CredentialArguments:
    """One credential-protocol record."""

    protocol: str
    host: str
    path: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def parse(cls, source: IO[str] | Iterable[str] | str) -> "CredentialArguments":
        """Read a record, stopping at the first blank line.

        Raises:
            CredentialInputError: If ``protocol`` or ``host`` is blank
        """
        lines: Iterable[str] = source.splitlines() if isinstance(source, str) else source
        values: dict[str, str] = {}
        for raw in lines:
            line = raw.rstrip("\r\n")
            if not line:
                break
            key, sep, value = line.partition("=")
            if sep and key in _FIELDS:
                values[key] = value
        if not values.get("protocol", "").strip():
            raise CredentialInputError("the protocol can't be empty")
        if not values.get("host", "").strip():
            raise CredentialInputError("the host can't be empty")
        return cls(
            protocol=values["protocol"],
            host=values["host"],
            path=values.get("path"),
            username=values.get("username"),
            password=values.get("password"),
        )

    def to_input(self) -> str:
        """Render the record for a helper's stdin (blank-line terminated)."""
        lines = [f"protocol={self.protocol}", f"host={self.host}"]
        for name in ("path", "username", "password"):
            value = getattr(self, name)
            if value:
                lines.append(f"{name}={value}")
        return "\n".join(lines) + "\n\n"


def format_credential(username: Optional[str], password: Optional[str]) -> str:
    """Output of a ``get``/``fill`` action; empty when nothing is known."""
    lines = []
    if username:
        lines.append(f"username={username}")
    if password:
        lines.append(f"password={password}")
    return "".join(f"{line}\n" for line in lines)


__all__ = ["CredentialArguments", "format_credential"]
