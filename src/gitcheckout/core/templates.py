"""Render bundled script templates with Jinja2."""
from __future__ import annotations

from typing import Any

from jinja2 import StrictUndefined, Template

from gitcheckout.data import read_text


def render_template(name: str, *, newline: str = "\n", **context: Any) -> str:
    """Render ``gitcheckout/data/templates/<name>``.

    Args:
        name: Template file name
        newline: Line ending of the rendered script (``\\r\\n`` for batch files)
        **context: Template variables; missing ones raise

    Returns:
        Rendered text, trailing newline preserved
    """
    template = Template(
        read_text("templates", name),
        keep_trailing_newline=True,
        newline_sequence=newline,
        undefined=StrictUndefined,
    )
    return template.render(**context)


def sh_quote_content(value: str) -> str:
    """Escape ``value`` for use inside a single-quoted sh string."""
    return str(value).replace("'", "'\"'\"'")


__all__ = ["render_template", "sh_quote_content"]
