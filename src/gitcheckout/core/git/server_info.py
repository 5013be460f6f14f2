"""Remote URL classification.

Turns any accepted remote URL form into a :class:`ServerInfo`:

- ``https://host[:port]/path[.git]`` and ``http://...``
- ``git@host:path[.git]`` (SCP-like, optionally with another user)
- ``host:path[.git]`` (bare SCP-like)
- ``ssh://git@host[:port]/path[.git]``

Embedded userinfo never reaches ``origin`` or ``host_name``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import quote

from gitcheckout.core.exceptions import ParamInvalidError

_HTTP_SCHEMES = ("http", "https")
_SCHEME_RE = re.compile(r"^(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*)://(?P<rest>.*)$")
_SCP_RE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>.*)$")

SSH_SCHEME = "git@"


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Classification of a remote repository URL."""

    scheme: str
    origin: str
    host_name: str
    repository_name: str
    http_protocol: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "scheme": self.scheme,
            "origin": self.origin,
            "host_name": self.host_name,
            "repository_name": self.repository_name,
            "http_protocol": self.http_protocol,
        }


def _repository_name(path: str) -> str:
    name = path.strip().strip("/")
    return name[: -len(".git")] if name.endswith(".git") else name


def _strip_userinfo(netloc: str) -> str:
    return netloc.rsplit("@", 1)[-1]


def get_server_info(url: str) -> ServerInfo:
    """Resolve a remote URL into a :class:`ServerInfo`.

    Args:
        url: Remote repository URL

    Returns:
        ServerInfo for the URL

    Raises:
        ParamInvalidError: If no host can be found or the scheme is unsupported
    """
    raw = str(url or "").strip()
    m = _SCHEME_RE.match(raw)
    if m:
        scheme = m.group("scheme").lower()
        netloc, _, path = m.group("rest").partition("/")
        host_name = _strip_userinfo(netloc)
        if not host_name:
            raise ParamInvalidError(f"Repository url has no host: {raw}", context={"url": raw})
        if scheme in _HTTP_SCHEMES:
            return ServerInfo(
                scheme=f"{scheme}://",
                origin=f"{scheme}://{host_name}",
                host_name=host_name,
                repository_name=_repository_name(path),
                http_protocol=True,
            )
        if scheme == "ssh":
            return ServerInfo(
                scheme=SSH_SCHEME,
                origin=f"{SSH_SCHEME}{host_name}",
                host_name=host_name,
                repository_name=_repository_name(path),
                http_protocol=False,
            )
        raise ParamInvalidError(f"Unsupported repository url scheme: {scheme}", context={"url": raw})

    m = _SCP_RE.match(raw)
    if not m or not m.group("host"):
        raise ParamInvalidError(f"Repository url has no host: {raw}", context={"url": raw})
    host_name = m.group("host")
    return ServerInfo(
        scheme=SSH_SCHEME,
        origin=f"{SSH_SCHEME}{host_name}",
        host_name=host_name,
        repository_name=_repository_name(m.group("path")),
        http_protocol=False,
    )


def is_same_repository(
    url: str,
    other_url: str,
    host_names: Optional[Iterable[str]] = None,
) -> bool:
    """Return True when both URLs point at the same repository.

    Scheme and userinfo are ignored. Different hosts only match when both
    appear in ``host_names`` (aliases of one backend).
    """
    if url == other_url:
        return True
    try:
        info = get_server_info(url)
        other = get_server_info(other_url)
    except ParamInvalidError:
        return False
    if info.repository_name != other.repository_name:
        return False
    if info.host_name == other.host_name:
        return True
    aliases = set(host_names or ())
    return info.host_name in aliases and other.host_name in aliases


def url_encode(value: str) -> str:
    """Percent-encode a credential for embedding in a URL userinfo."""
    return quote(str(value), safe="")


__all__ = ["SSH_SCHEME", "ServerInfo", "get_server_info", "is_same_repository", "url_encode"]
