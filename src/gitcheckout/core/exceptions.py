from __future__ import annotations

from typing import Any, Dict, Mapping


class GitCheckoutError(Exception):
    """Base exception for gitcheckout."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ParamInvalidError(GitCheckoutError, ValueError):
    """Raised when required input (URL, secret material) is missing or malformed.

    This is the only error class that is allowed to break the build step.
    """

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitCheckoutError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class SettingsError(ParamInvalidError):
    """Raised when the checkout settings file or environment is invalid."""


class GitCommandError(GitCheckoutError, RuntimeError):
    """Raised when a git (or helper) command exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        command: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if exit_code is not None:
            ctx["exit_code"] = exit_code
        if command:
            ctx["command"] = command
        GitCheckoutError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)
        self.exit_code = exit_code


class GlobalScopeError(GitCheckoutError, OSError):
    """Raised when the isolated global git scope cannot be created."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitCheckoutError.__init__(self, message, context=context)
        OSError.__init__(self, message)


class CredentialInputError(GitCheckoutError, ValueError):
    """Raised when a credential-protocol record lacks protocol or host."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitCheckoutError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class CredentialStoreError(GitCheckoutError):
    """Raised when the credential store file cannot be read or written."""


class SshAgentError(GitCheckoutError):
    """Raised when ssh-agent cannot be started or refuses the identity."""


__all__ = [
    "GitCheckoutError",
    "ParamInvalidError",
    "SettingsError",
    "GitCommandError",
    "GlobalScopeError",
    "CredentialInputError",
    "CredentialStoreError",
    "SshAgentError",
]
