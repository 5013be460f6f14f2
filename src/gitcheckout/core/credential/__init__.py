"""The ``git-checkout-credential`` helper: wire protocol, store, program and installer."""
from __future__ import annotations

from gitcheckout.core.credential.protocol import CredentialArguments
from gitcheckout.core.credential.store import Credential, CredentialStore

__all__ = ["CredentialArguments", "Credential", "CredentialStore"]
