"""Host-set resolution for compatible host aliases."""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from gitcheckout.core.constants import HTTP_PROTOCOLS
from gitcheckout.core.git.server_info import ServerInfo


def resolve_host_set(server_info: ServerInfo, compatible_hosts: Optional[Iterable[str]] = None) -> set[str]:
    """Return the hosts that receive identical credential/rewrite treatment.

    The aliases are only added when the primary host is itself one of them,
    so a configured alias list never widens rewriting to unrelated hosts.
    """
    hosts = {server_info.host_name}
    aliases = [h for h in (compatible_hosts or ()) if h]
    if server_info.host_name in aliases:
        hosts.update(aliases)
    return hosts


def iter_protocol_hosts(hosts: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(protocol, host)`` for every host over https and http."""
    for host in sorted(hosts):
        for protocol in HTTP_PROTOCOLS:
            yield protocol, host


__all__ = ["resolve_host_set", "iter_protocol_hosts"]
