"""Credential-delivery strategies and the machinery that selects and scopes them."""
from __future__ import annotations

from gitcheckout.core.auth.hosts import iter_protocol_hosts, resolve_host_set
from gitcheckout.core.auth.models import AuthHelperType, AuthInfo

__all__ = ["AuthHelperType", "AuthInfo", "iter_protocol_hosts", "resolve_host_set"]
