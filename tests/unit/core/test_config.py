"""Settings layering and validation."""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gitcheckout.core.auth.models import AuthHelperType
from gitcheckout.core.config import AgentEnv, CheckoutConfig, load_settings
from gitcheckout.core.exceptions import SettingsError


def write_settings(path: Path, checkout: dict) -> Path:
    path.write_text(yaml.safe_dump({"checkout": checkout}), encoding="utf-8")
    return path


class TestLoadSettings:
    def test_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(env={})

        assert settings.repository_url == ""
        assert settings.submodules is True
        assert settings.auth_helper is None
        assert settings.git_timeout_seconds == 600.0
        assert settings.credential_home == Path("~/.checkout").expanduser()

    def test_file_then_env_then_overrides(self, tmp_path: Path) -> None:
        config = write_settings(
            tmp_path / "checkout.yaml",
            {
                "repository_url": "https://git.example.com/a.git",
                "repository_path": "src",
                "auth": {"username": "file-user", "password": "file-pw"},
                "submodules": False,
            },
        )
        env = {
            "CHECKOUT_USERNAME": "env-user",
            "CHECKOUT_COMPATIBLE_HOSTS": "git.example.com, mirror.example.com,",
            "CHECKOUT_PRE_MERGE": "yes",
            "BK_CI_PIPELINE_ID": "p-9",
        }

        settings = load_settings(config, env=env, overrides={"auth_helper": "SSH", "task_id": None})

        assert settings.repository_path == tmp_path / "src"
        assert settings.auth_info.username == "env-user"
        assert settings.auth_info.password == "file-pw"
        assert settings.compatible_hosts == ("git.example.com", "mirror.example.com")
        assert settings.pre_merge is True
        assert settings.submodules is False
        assert settings.pipeline_id == "p-9"
        assert settings.auth_helper is AuthHelperType.SSH

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / "absent.yaml", env={}).repository_url == ""

    def test_schema_violations_are_listed(self, tmp_path: Path) -> None:
        config = write_settings(tmp_path / "c.yaml", {"auth_helper": "TOKEN", "unknown": 1})

        with pytest.raises(SettingsError) as exc:
            load_settings(config, env={})

        errors = exc.value.context["errors"]
        assert any(e.startswith("auth_helper:") for e in errors)
        assert any("unknown" in e for e in errors)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "c.yaml"
        config.write_text("checkout: [unclosed\n", encoding="utf-8")

        with pytest.raises(SettingsError):
            CheckoutConfig(config, env={}).load()

    def test_invalid_timeout_env(self) -> None:
        with pytest.raises(SettingsError):
            load_settings(env={"CHECKOUT_GIT_TIMEOUT_SECONDS": "soon"})

    def test_to_dict_hides_secrets(self) -> None:
        settings = load_settings(env={"CHECKOUT_USERNAME": "u", "CHECKOUT_PASSWORD": "hunter2"})

        assert "hunter2" not in repr(settings.to_dict())
        assert "hunter2" not in repr(settings)


class TestVirtualRemote:
    @pytest.mark.parametrize(
        ("pre_merge", "source", "expected"),
        [
            (True, "https://git.example.com/fork/app.git", True),
            (True, "https://git.example.com/group/app", False),
            (True, "", False),
            (False, "https://git.example.com/fork/app.git", False),
        ],
    )
    def test_has_virtual_remote(self, make_settings, pre_merge: bool, source: str, expected: bool) -> None:
        settings = make_settings(pre_merge=pre_merge, source_repository_url=source)

        assert settings.has_virtual_remote is expected


class TestAgentEnv:
    def test_from_env(self) -> None:
        agent = AgentEnv.from_env({"BK_CI_BUILD_TYPE": "AGENT", "DEVOPS_SLAVE_ENVIRONMENT": "pcg-devcloud"})

        assert agent.is_third_party()
        assert agent.is_docker()
        assert not agent.home_present

    @pytest.mark.parametrize(
        ("build_type", "expected"),
        [("DOCKER", True), ("PUBLIC_DEVCLOUD", True), ("AGENT", False), ("", True)],
    )
    def test_is_docker(self, build_type: str, expected: bool) -> None:
        assert AgentEnv(build_type=build_type).is_docker() is expected
