"""Submodule enumeration and ``git submodule status`` parsing."""
from __future__ import annotations

from pathlib import Path

import pytest

from gitcheckout.core.git.command import GitCommandManager
from gitcheckout.core.git.submodules import (
    SubmoduleStatus,
    get_submodules,
    parse_submodule_status,
    resolve_submodule_url,
)
from helpers.git_helpers import add_fake_submodule


class TestParseSubmoduleStatus:
    """Lines read ``[ +-U]<sha> <path>[ (<describe>)]``."""

    SHA = "0123456789abcdef0123456789abcdef01234567"

    def test_plain_line(self) -> None:
        statuses = parse_submodule_status(f" {self.SHA} libs/core (v1.2.0)")

        assert statuses == [SubmoduleStatus(status="", commit_id=self.SHA, path="libs/core", ref="v1.2.0")]

    def test_path_with_spaces_and_non_ascii(self) -> None:
        """Only the trailing describe suffix is split off the path."""
        statuses = parse_submodule_status(f"+{self.SHA} vendor/my lib/模块 (heads/main)")

        assert statuses[0].status == "+"
        assert statuses[0].path == "vendor/my lib/模块"
        assert statuses[0].ref == "heads/main"

    def test_missing_and_empty_describe(self) -> None:
        """Uninitialized modules have no describe; ``()`` means an empty ref."""
        output = f"-{self.SHA} libs/absent\n {self.SHA} libs/empty ()\n"

        absent, empty = parse_submodule_status(output)

        assert absent.status == "-"
        assert absent.path == "libs/absent"
        assert absent.ref == ""
        assert empty.path == "libs/empty"
        assert empty.ref == ""

    def test_blank_lines_are_skipped(self) -> None:
        assert parse_submodule_status(["", "   "]) == []


class TestResolveSubmoduleUrl:
    @pytest.mark.parametrize(
        "url, parent, expected",
        [
            ("../lib.git", "https://git.example.com/group/app.git", "https://git.example.com/group/lib.git"),
            ("./lib.git", "https://git.example.com/group/app", "https://git.example.com/group/app/lib.git"),
            ("../../other/lib.git", "git@git.example.com:group/app.git", "git@git.example.com:other/lib.git"),
            ("https://elsewhere.example.com/lib.git", "https://git.example.com/group/app.git",
             "https://elsewhere.example.com/lib.git"),
        ],
    )
    def test_relative_urls_resolve_against_parent(self, url: str, parent: str, expected: str) -> None:
        assert resolve_submodule_url(url, parent) == expected


@pytest.mark.requires_git
class TestGetSubmodules:
    """Enumeration reads ``.gitmodules`` fresh on every call."""

    def test_lists_declared_submodules(self, repo: Path, git: GitCommandManager) -> None:
        add_fake_submodule(repo, "lib", "libs/lib", "https://git.example.com/group/lib.git")
        add_fake_submodule(repo, "tools", "tools", "../tools.git")

        submodules = {s.name: s for s in get_submodules(git, repo)}

        assert set(submodules) == {"lib", "tools"}
        assert submodules["lib"].absolute_path == repo / "libs" / "lib"
        assert submodules["tools"].url == "https://git.example.com/group/tools.git"

    def test_nested_submodules_only_when_recursive(self, repo: Path, git: GitCommandManager) -> None:
        lib = add_fake_submodule(repo, "lib", "lib", "https://git.example.com/group/lib.git")
        add_fake_submodule(lib, "inner", "inner", "https://git.example.com/group/inner.git")

        flat = [s.name for s in get_submodules(git, repo)]
        nested = [s.name for s in get_submodules(git, repo, recursive=True)]

        assert flat == ["lib"]
        assert nested == ["lib", "inner"]

    def test_repository_without_gitmodules(self, repo: Path, git: GitCommandManager) -> None:
        assert get_submodules(git, repo) == []

    def test_new_declarations_are_seen_without_caching(self, repo: Path, git: GitCommandManager) -> None:
        assert get_submodules(git, repo) == []
        add_fake_submodule(repo, "late", "late", "https://git.example.com/group/late.git")

        assert [s.name for s in get_submodules(git, repo)] == ["late"]
