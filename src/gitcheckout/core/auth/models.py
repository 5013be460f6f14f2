"""Auth data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AuthHelperType(str, Enum):
    """Credential-delivery strategy tag, persisted in the repository config."""

    ASK_PASS = "ASK_PASS"
    STORE_CREDENTIAL = "STORE_CREDENTIAL"
    CUSTOM_CREDENTIAL = "CUSTOM_CREDENTIAL"
    USERNAME_PASSWORD = "USERNAME_PASSWORD"
    SSH = "SSH"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["AuthHelperType"]:
        """Return the member named ``value`` or None for unknown/blank tags."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class AuthInfo:
    """Credentials supplied to the step. Secrets never appear in ``repr``."""

    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    private_key: Optional[str] = field(default=None, repr=False)
    pass_phrase: Optional[str] = field(default=None, repr=False)

    @property
    def has_username_password(self) -> bool:
        return bool(self.username) and bool(self.password)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthInfo":
        return cls(
            username=data.get("username") or None,
            password=data.get("password") or None,
            private_key=data.get("private_key") or None,
            pass_phrase=data.get("pass_phrase") or None,
        )


__all__ = ["AuthHelperType", "AuthInfo"]
