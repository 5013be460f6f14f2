"""Git command runner.

Wraps ``subprocess.run`` for every git invocation the checkout step makes.
Commands run with the process environment plus a set of per-step overrides
(HOME, XDG_CONFIG_HOME, GIT_ASKPASS, ...) so that isolation never mutates
``os.environ`` of the host process.
"""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Sequence

from gitcheckout.core.constants import GIT_TERMINAL_PROMPT, HOME, XDG_CONFIG_HOME
from gitcheckout.core.exceptions import GitCommandError
from gitcheckout.core.git.version import GitVersion
from gitcheckout.core.redaction import redact, redact_git_args

logger = logging.getLogger(__name__)

# git config exits 1 when a key is missing and 5 when unsetting a missing key.
_CONFIG_MISSING_EXIT_CODES = (1, 5)


class GitConfigScope(str, Enum):
    """Target configuration file for ``git config``."""

    LOCAL = "local"
    GLOBAL = "global"
    SYSTEM = "system"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one command invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    stdout_lines: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class GitCommandManager:
    """Run git commands for one repository working directory.

    Args:
        working_directory: Default cwd for commands (the main repository)
        timeout: Per-command timeout in seconds
        git_executable: Name or path of the git binary
    """

    def __init__(
        self,
        working_directory: Path | str,
        *,
        timeout: float = 600.0,
        git_executable: str = "git",
    ) -> None:
        self.working_directory = Path(working_directory)
        self.timeout = timeout
        self.git_executable = git_executable
        self._env_overrides: dict[str, str] = {}
        self._version: Optional[GitVersion] = None

    # ----- Environment overrides -----
    def set_environment_variable(self, name: str, value: str) -> None:
        self._env_overrides[name] = value

    def remove_environment_variable(self, name: str) -> Optional[str]:
        """Drop an override and return its previous value (None when unset)."""
        return self._env_overrides.pop(name, None)

    def get_environment_variable(self, name: str) -> Optional[str]:
        return self._env_overrides.get(name)

    @property
    def environment_overrides(self) -> dict[str, str]:
        return dict(self._env_overrides)

    def build_environment(self, *, bypass_overrides: bool = False) -> dict[str, str]:
        """Return the full environment for a child process.

        Args:
            bypass_overrides: Drop the HOME/XDG_CONFIG_HOME overrides so the
                command sees the agent's real global configuration.
        """
        env = os.environ.copy()
        env.update(self._env_overrides)
        env[GIT_TERMINAL_PROMPT] = "0"
        if bypass_overrides:
            for name in (HOME, XDG_CONFIG_HOME):
                if name in self._env_overrides:
                    if name in os.environ:
                        env[name] = os.environ[name]
                    else:
                        env.pop(name, None)
        return env

    # ----- Execution -----
    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        input: Optional[str] = None,
        allow_all_exit_codes: bool = False,
        bypass_overrides: bool = False,
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """Run ``git <args>``.

        Args:
            args: Git arguments (without the executable)
            cwd: Working directory, defaults to the repository
            input: Text written to stdin
            allow_all_exit_codes: Return non-zero results instead of raising
            bypass_overrides: See :meth:`build_environment`
            extra_env: Additional variables for this invocation only

        Returns:
            CommandResult

        Raises:
            GitCommandError: On non-zero exit (unless allowed) or when git
                cannot be started
        """
        argv = [self.git_executable, *[str(a) for a in args]]
        safe_cmd = " ".join(redact_git_args(argv))
        env = self.build_environment(bypass_overrides=bypass_overrides)
        if extra_env:
            env.update(extra_env)
        workdir = Path(cwd) if cwd is not None else self.working_directory
        logger.debug("##[command]$ %s", safe_cmd)
        try:
            proc = subprocess.run(
                argv,
                cwd=workdir,
                input=input,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GitCommandError(
                f"Git command failed to run: {safe_cmd}\n{redact(str(e))}",
                command=safe_cmd,
            ) from e

        stdout = proc.stdout or ""
        result = CommandResult(
            exit_code=proc.returncode,
            stdout=stdout,
            stderr=proc.stderr or "",
            stdout_lines=stdout.splitlines(),
        )
        if result.exit_code != 0 and not allow_all_exit_codes:
            safe_output = redact(result.stderr.strip() or result.stdout.strip())
            raise GitCommandError(
                f"Git command failed: {safe_cmd}\n{safe_output}",
                exit_code=result.exit_code,
                command=safe_cmd,
            )
        return result

    # ----- Version -----
    def version(self) -> GitVersion:
        if self._version is None:
            result = self.execute(["--version"])
            self._version = GitVersion.parse(result.stdout)
        return self._version

    def is_at_least_version(self, minimum: GitVersion) -> bool:
        return self.version() >= minimum

    # ----- git config -----
    @staticmethod
    def _scope_args(scope: GitConfigScope, config_file: Path | str | None) -> list[str]:
        if scope is GitConfigScope.FILE:
            if config_file is None:
                raise ValueError("config_file is required for GitConfigScope.FILE")
            return ["--file", str(config_file)]
        return [f"--{scope.value}"]

    def config(
        self,
        key: str,
        value: str,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
        bypass_overrides: bool = False,
    ) -> None:
        """Set ``key`` to ``value`` (replacing a single existing value)."""
        self.execute(
            ["config", *self._scope_args(scope, config_file), key, value],
            cwd=cwd,
            bypass_overrides=bypass_overrides,
        )

    def config_add(
        self,
        key: str,
        value: str,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
        bypass_overrides: bool = False,
    ) -> None:
        """Append another value to a multi-valued key."""
        self.execute(
            ["config", *self._scope_args(scope, config_file), "--add", key, value],
            cwd=cwd,
            bypass_overrides=bypass_overrides,
        )

    def try_config_get(
        self,
        key: str,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
    ) -> str:
        """Return the last value of ``key`` or an empty string when unset."""
        values = self.try_config_get_all(key, scope=scope, cwd=cwd, config_file=config_file)
        return values[-1] if values else ""

    def try_config_get_all(
        self,
        key: str,
        *,
        scope: GitConfigScope | None = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
    ) -> list[str]:
        """Return every value of ``key`` (empty list when unset).

        ``scope=None`` reads the effective (merged) configuration.
        """
        scope_args = self._scope_args(scope, config_file) if scope is not None else []
        result = self.execute(
            ["config", *scope_args, "--null", "--get-all", key],
            cwd=cwd,
            allow_all_exit_codes=True,
        )
        if result.exit_code != 0:
            return []
        return result.stdout.split("\0")[:-1]

    def try_config_get_regexp(
        self,
        key_regex: str,
        *,
        scope: GitConfigScope | None = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
        bypass_overrides: bool = False,
    ) -> list[tuple[str, str]]:
        """Return ``(key, value)`` pairs whose key matches ``key_regex``.

        Keys are reported the way git prints them: section and variable name
        lower-cased, subsection verbatim.
        """
        scope_args = self._scope_args(scope, config_file) if scope is not None else []
        result = self.execute(
            ["config", *scope_args, "--null", "--get-regexp", key_regex],
            cwd=cwd,
            allow_all_exit_codes=True,
            bypass_overrides=bypass_overrides,
        )
        if result.exit_code != 0:
            return []
        pairs: list[tuple[str, str]] = []
        for entry in result.stdout.split("\0")[:-1]:
            key, _, value = entry.partition("\n")
            pairs.append((key, value))
        return pairs

    def config_exists(
        self,
        key: str,
        value_regex: Optional[str] = None,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        bypass_overrides: bool = False,
    ) -> bool:
        args = ["config", *self._scope_args(scope, None), "--get-all", key]
        if value_regex is not None:
            args.append(value_regex)
        result = self.execute(
            args,
            cwd=cwd,
            allow_all_exit_codes=True,
            bypass_overrides=bypass_overrides,
        )
        return result.exit_code == 0

    def try_config_unset(
        self,
        key: str,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
        bypass_overrides: bool = False,
    ) -> bool:
        """Remove every value of ``key``; a missing key is not an error."""
        result = self.execute(
            ["config", *self._scope_args(scope, config_file), "--unset-all", key],
            cwd=cwd,
            allow_all_exit_codes=True,
            bypass_overrides=bypass_overrides,
        )
        if result.exit_code not in (0, *_CONFIG_MISSING_EXIT_CODES):
            logger.debug("Unable to unset %s: %s", key, redact(result.stderr.strip()))
        return result.exit_code == 0

    def try_config_remove_section(
        self,
        section: str,
        *,
        scope: GitConfigScope = GitConfigScope.LOCAL,
        cwd: Path | str | None = None,
        config_file: Path | str | None = None,
    ) -> bool:
        result = self.execute(
            ["config", *self._scope_args(scope, config_file), "--remove-section", section],
            cwd=cwd,
            allow_all_exit_codes=True,
        )
        return result.exit_code == 0

    # ----- Other porcelain -----
    def credential(self, action: str, credential_input: str, *, cwd: Path | str | None = None) -> CommandResult:
        """Run ``git credential <action>`` with a wire-format record on stdin.

        Failures are logged, not raised: credential replication is best-effort.
        """
        result = self.execute(
            ["credential", action],
            cwd=cwd,
            input=credential_input,
            allow_all_exit_codes=True,
        )
        if result.exit_code != 0:
            logger.debug("git credential %s exited %s", action, result.exit_code)
        return result

    def submodule_status(self, *, recursive: bool = False, cwd: Path | str | None = None) -> list[str]:
        args = ["submodule", "status"]
        if recursive:
            args.append("--recursive")
        return self.execute(args, cwd=cwd).stdout_lines


__all__ = ["CommandResult", "GitCommandManager", "GitConfigScope"]
