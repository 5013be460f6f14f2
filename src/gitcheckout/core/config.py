"""Checkout settings loading and agent environment detection.

Settings are layered, lowest priority first:

1. Bundled defaults (``gitcheckout/data/config/defaults.yaml``)
2. The ``checkout:`` section of a YAML settings file
3. Environment variables (``CHECKOUT_*`` and the ``BK_CI_*`` build ids)
4. Explicit overrides passed by the caller (CLI flags)

The merged mapping is validated against
``gitcheckout/data/schemas/settings.schema.yaml``.
"""
from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

from gitcheckout.core.auth.models import AuthHelperType, AuthInfo
from gitcheckout.core.constants import BK_CI_BUILD_TYPE, DEVOPS_SLAVE_ENVIRONMENT, HOME
from gitcheckout.core.exceptions import SettingsError
from gitcheckout.core.git.server_info import is_same_repository
from gitcheckout.data import read_yaml

_BOOL_KEYS = frozenset(
    {"pre_merge", "submodules", "nested_submodules", "enable_global_insteadof", "use_custom_credential"}
)
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

THIRD_PARTY_BUILD_TYPE = "AGENT"
THIRD_PARTY_DOCKER_ENVIRONMENT = "pcg-devcloud"


@dataclass(frozen=True, slots=True)
class GitSourceSettings:
    """Everything one checkout step needs to know about its repository."""

    repository_url: str
    repository_path: Path
    auth_info: AuthInfo = field(default_factory=AuthInfo)
    source_repository_url: str = ""
    pre_merge: bool = False
    compatible_hosts: tuple[str, ...] = ()
    submodules: bool = True
    nested_submodules: bool = True
    enable_global_insteadof: bool = False
    use_custom_credential: bool = False
    auth_helper: Optional[AuthHelperType] = None
    pipeline_id: str = ""
    job_id: str = ""
    task_id: str = ""
    credential_home: Path = field(default_factory=lambda: Path("~/.checkout").expanduser())
    git_timeout_seconds: float = 600.0
    log_level: str = "INFO"

    @property
    def has_virtual_remote(self) -> bool:
        """True when a pre-merge build fetches from a distinct source repository."""
        return (
            self.pre_merge
            and bool(self.source_repository_url)
            and not is_same_repository(self.repository_url, self.source_repository_url)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, base_dir: Path | None = None) -> "GitSourceSettings":
        """Create settings from a merged, validated mapping."""
        repo_path = Path(str(data.get("repository_path") or ".")).expanduser()
        if not repo_path.is_absolute():
            repo_path = (base_dir or Path.cwd()) / repo_path
        return cls(
            repository_url=str(data.get("repository_url") or ""),
            repository_path=repo_path,
            auth_info=AuthInfo.from_dict(dict(data.get("auth") or {})),
            source_repository_url=str(data.get("source_repository_url") or ""),
            pre_merge=bool(data.get("pre_merge", False)),
            compatible_hosts=tuple(str(h) for h in data.get("compatible_hosts") or ()),
            submodules=bool(data.get("submodules", True)),
            nested_submodules=bool(data.get("nested_submodules", True)),
            enable_global_insteadof=bool(data.get("enable_global_insteadof", False)),
            use_custom_credential=bool(data.get("use_custom_credential", False)),
            auth_helper=AuthHelperType.from_value(data.get("auth_helper")),
            pipeline_id=str(data.get("pipeline_id") or ""),
            job_id=str(data.get("job_id") or ""),
            task_id=str(data.get("task_id") or ""),
            credential_home=Path(str(data.get("credential_home") or "~/.checkout")).expanduser(),
            git_timeout_seconds=float(data.get("git_timeout_seconds") or 600),
            log_level=str(data.get("log_level") or "INFO"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializable view with secrets masked."""
        return {
            "repository_url": self.repository_url,
            "repository_path": str(self.repository_path),
            "username": self.auth_info.username,
            "source_repository_url": self.source_repository_url,
            "pre_merge": self.pre_merge,
            "compatible_hosts": list(self.compatible_hosts),
            "submodules": self.submodules,
            "nested_submodules": self.nested_submodules,
            "enable_global_insteadof": self.enable_global_insteadof,
            "use_custom_credential": self.use_custom_credential,
            "auth_helper": self.auth_helper.value if self.auth_helper else None,
            "pipeline_id": self.pipeline_id,
            "job_id": self.job_id,
            "task_id": self.task_id,
            "credential_home": str(self.credential_home),
        }


@dataclass(frozen=True, slots=True)
class AgentEnv:
    """Facts about the build agent the step runs on."""

    build_type: str = ""
    slave_environment: str = ""
    home: Optional[str] = None
    os_name: str = os.name

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AgentEnv":
        source = os.environ if env is None else env
        return cls(
            build_type=source.get(BK_CI_BUILD_TYPE, ""),
            slave_environment=source.get(DEVOPS_SLAVE_ENVIRONMENT, ""),
            home=source.get(HOME),
        )

    def is_third_party(self) -> bool:
        """Shared, user-provided agent (not a per-build container)."""
        return self.build_type == THIRD_PARTY_BUILD_TYPE

    def is_third_docker(self) -> bool:
        return self.slave_environment == THIRD_PARTY_DOCKER_ENVIRONMENT

    def is_docker(self) -> bool:
        """Fully isolated agent whose global config belongs to this build alone."""
        return self.is_third_docker() or not self.is_third_party()

    def is_windows(self) -> bool:
        return self.os_name == "nt"

    @property
    def home_present(self) -> bool:
        return self.home is not None


def _deep_merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _set_dotted(target: dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    node = target
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value


def _coerce_env_value(key: str, raw: str) -> Any:
    if key in _BOOL_KEYS:
        return raw.strip().lower() in _TRUE_VALUES
    if key == "compatible_hosts":
        return [h.strip() for h in raw.split(",") if h.strip()]
    if key == "git_timeout_seconds":
        try:
            return float(raw)
        except ValueError as e:
            raise SettingsError(f"Invalid git timeout: {raw!r}") from e
    return raw


class CheckoutConfig:
    """Load and validate checkout settings.

    Args:
        config_path: Optional YAML settings file
        env: Environment mapping (defaults to ``os.environ``)
    """

    def __init__(self, config_path: Path | str | None = None, *, env: Optional[Mapping[str, str]] = None) -> None:
        self._config_path = Path(config_path) if config_path else None
        self.env = os.environ if env is None else env
        self._file_config: dict[str, Any] | None = None

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def _load(self) -> dict[str, Any]:
        """Load the settings file (empty when absent)."""
        if self._file_config is not None:
            return self._file_config
        if self._config_path is None or not self._config_path.exists():
            self._file_config = {}
            return self._file_config
        try:
            content = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid settings file {self._config_path}: {e}") from e
        if not isinstance(content, dict):
            raise SettingsError(f"Settings file must be a mapping: {self._config_path}")
        self._file_config = dict(content.get("checkout") or {})
        return self._file_config

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Return the merged (unvalidated) settings mapping."""
        defaults = read_yaml("config", "defaults.yaml")
        merged = copy.deepcopy(defaults.get("checkout") or {})
        _deep_merge(merged, self._load())
        for env_name, dotted in (defaults.get("environment") or {}).items():
            raw = self.env.get(env_name)
            if raw is not None and raw != "":
                _set_dotted(merged, dotted, _coerce_env_value(dotted, raw))
        if overrides:
            for dotted, value in overrides.items():
                if value is not None:
                    _set_dotted(merged, dotted, value)
        return merged

    def validate(self, data: Mapping[str, Any]) -> None:
        """Validate ``data`` against the bundled JSON schema.

        Raises:
            SettingsError: Listing every violation
        """
        schema = read_yaml("schemas", "settings.schema.yaml")
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            details = [
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
            ]
            raise SettingsError(
                "Invalid checkout settings:\n  " + "\n  ".join(details),
                context={"errors": details},
            )

    def load(self, overrides: Optional[Mapping[str, Any]] = None) -> GitSourceSettings:
        data = self.merged(overrides)
        self.validate(data)
        base_dir = self._config_path.parent if self._config_path else None
        return GitSourceSettings.from_dict(data, base_dir=base_dir)


def load_settings(
    config_path: Path | str | None = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GitSourceSettings:
    """Convenience wrapper around :class:`CheckoutConfig`."""
    return CheckoutConfig(config_path, env=env).load(overrides)


__all__ = ["GitSourceSettings", "AgentEnv", "CheckoutConfig", "load_settings"]
