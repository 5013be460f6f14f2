"""Rendering of the bundled helper scripts."""
from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from jinja2 import UndefinedError

from gitcheckout.core.templates import render_template, sh_quote_content


def _run_script(path: Path, content: str, *args: str) -> str:
    path.write_text(content, encoding="utf-8")
    path.chmod(0o700)
    return subprocess.run(
        ["sh", str(path), *args], capture_output=True, text=True, check=True, timeout=30
    ).stdout


class TestShellScripts:
    @pytest.mark.parametrize("secret", ["p\\tq\\n", "it's \\c done", "\\\\server\\share", "-n"])
    def test_ssh_askpass_prints_pass_phrase_verbatim(self, tmp_path: Path, secret: str) -> None:
        content = render_template("ssh-askpass.sh.j2", pass_phrase=sh_quote_content(secret))

        assert _run_script(tmp_path / "ssh-askpass.sh", content) == secret + "\n"

    def test_askpass_answers_by_prompt(self, tmp_path: Path) -> None:
        content = render_template(
            "askpass.sh.j2",
            username=sh_quote_content("ci\\user"),
            password=sh_quote_content("s3\\cr'3t"),
        )
        script = tmp_path / "askpass.sh"

        assert _run_script(script, content, "Username for 'https://h': ") == "ci\\user\n"
        assert _run_script(script, content, "Password for 'https://ci@h': ") == "s3\\cr'3t\n"
        assert _run_script(script, content, "Something else") == ""

    def test_missing_variable_raises(self) -> None:
        with pytest.raises(UndefinedError, match="pass_phrase"):
            render_template("ssh-askpass.sh.j2")
