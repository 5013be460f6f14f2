import os
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent

from gitcheckout.core.auth.models import AuthInfo
from gitcheckout.core.config import AgentEnv, GitSourceSettings
from gitcheckout.core.git.command import GitCommandManager
from gitcheckout.core.stdlib_logging import reset_logging_for_tests
from helpers.git_helpers import git_init

REPO_URL = "https://git.example.com/group/app.git"

# Variables from the developer's shell that change how git or the settings
# loader behave. Tests must be deterministic.
_LEAK_PRONE_ENV_PREFIXES = ("CHECKOUT_", "BK_CI_", "GIT_")
_LEAK_PRONE_ENV_KEYS = (
    "XDG_CONFIG_HOME",
    "SSH_AUTH_SOCK",
    "SSH_AGENT_PID",
    "SSH_ASKPASS",
    "DEVOPS_SLAVE_ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the temp directory into ``tmp_path`` for every test.

    Returns the fake HOME, whose ``.gitconfig`` is the global config the code
    under test sees.
    """
    for key in list(os.environ):
        if key.startswith(_LEAK_PRONE_ENV_PREFIXES) or key in _LEAK_PRONE_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    scratch = tmp_path / "tmp"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return home


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging_for_tests()


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A freshly initialized repository whose origin is :data:`REPO_URL`."""
    path = tmp_path / "repo"
    path.mkdir()
    git_init(path, origin=REPO_URL)
    return path


@pytest.fixture
def git(repo: Path) -> GitCommandManager:
    return GitCommandManager(repo, timeout=60)


@pytest.fixture
def agent(isolated_git_env: Path) -> AgentEnv:
    """A per-build (docker) agent with HOME set."""
    return AgentEnv(build_type="DOCKER", home=str(isolated_git_env), os_name="posix")


@pytest.fixture
def make_settings(repo: Path, tmp_path: Path):
    """Factory for settings bound to :func:`repo`; keyword arguments override fields."""

    base = GitSourceSettings(
        repository_url=REPO_URL,
        repository_path=repo,
        auth_info=AuthInfo(username="ci-user", password="s3cr3t:pw"),
        pipeline_id="p-1",
        job_id="j-1",
        task_id="t-1",
        credential_home=tmp_path / "checkout-home",
        git_timeout_seconds=60,
    )

    def _make(**overrides) -> GitSourceSettings:
        return replace(base, **overrides)

    return _make
