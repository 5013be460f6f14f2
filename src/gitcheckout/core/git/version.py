"""Git client version parsing and comparison."""
from __future__ import annotations

import re
from dataclasses import dataclass

from gitcheckout.core.exceptions import ParamInvalidError

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass(frozen=True, slots=True, order=True)
class GitVersion:
    """A comparable git version (``major.minor.patch.build``)."""

    major: int
    minor: int
    patch: int = 0
    build: int = 0

    @classmethod
    def parse(cls, text: str) -> "GitVersion":
        """Parse ``git --version`` output or a bare version string.

        Accepts vendor suffixes such as ``2.39.2.windows.1`` or
        ``2.37.1 (Apple Git-137.1)``.

        Raises:
            ParamInvalidError: If no version number can be found
        """
        m = _VERSION_RE.search(str(text))
        if not m:
            raise ParamInvalidError(f"Unable to parse git version from: {text!r}")
        major, minor, patch, build = (int(g) if g else 0 for g in m.groups())
        return cls(major=major, minor=minor, patch=patch, build=build)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}.{self.build}" if self.build else base


# Minimum versions gating individual mechanisms.
SUPPORT_CRED_HELPER_GIT_VERSION = GitVersion(1, 7, 10)
SUPPORT_XDG_CONFIG_HOME_GIT_VERSION = GitVersion(1, 7, 12)
SUPPORT_EMPTY_CRED_HELPER_GIT_VERSION = GitVersion(2, 9, 0)


__all__ = [
    "GitVersion",
    "SUPPORT_CRED_HELPER_GIT_VERSION",
    "SUPPORT_XDG_CONFIG_HOME_GIT_VERSION",
    "SUPPORT_EMPTY_CRED_HELPER_GIT_VERSION",
]
