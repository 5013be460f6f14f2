"""Bundled resources of gitcheckout.

- ``config/defaults.yaml``: default settings and the environment mapping
- ``schemas/settings.schema.yaml``: JSON schema of the settings file
- ``templates/*.j2``: askpass and credential helper scripts
"""

from __future__ import annotations

import copy
from functools import lru_cache
from importlib import resources
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable


def resource(kind: str, name: str) -> Traversable:
    """Return the bundled resource ``<kind>/<name>``."""
    return resources.files(__name__) / kind / name


@lru_cache(maxsize=8)
def _load_yaml(kind: str, name: str) -> dict[str, Any]:
    return yaml.safe_load(resource(kind, name).read_text(encoding="utf-8")) or {}


def read_yaml(kind: str, name: str) -> dict[str, Any]:
    """Parse a bundled YAML document.

    Parsing is cached; callers get their own copy and may modify it.
    """
    return copy.deepcopy(_load_yaml(kind, name))


def read_text(kind: str, name: str) -> str:
    return resource(kind, name).read_text(encoding="utf-8")


__all__ = ["resource", "read_yaml", "read_text"]
