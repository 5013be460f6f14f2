from __future__ import annotations

import logging
import sys
from pathlib import Path

from gitcheckout.core.redaction import redact

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONFIGURED_LOG_PATH: str | None = None


class RedactingFilter(logging.Filter):
    """Rewrite every record through :func:`redact` before it is emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = redact(record.getMessage())
        record.msg = message
        record.args = None
        return True


def _level_from_name(name: str) -> int:
    try:
        return int(getattr(logging, name.upper()))
    except (AttributeError, TypeError, ValueError):
        return logging.INFO


def configure_logging(*, level: str = "INFO", log_path: Path | None = None) -> None:
    """Configure stdlib logging for a build step.

    Installs a stderr handler and, when ``log_path`` is given, a file handler.
    Both carry a :class:`RedactingFilter`. Idempotent per-process: calling it
    again only adjusts the level and swaps the file handler when the path
    changes.
    """
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))
    fmt = logging.Formatter(_LOG_FORMAT)

    if _STREAM_HANDLER is None:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(fmt)
        sh.addFilter(RedactingFilter())
        root.addHandler(sh)
        _STREAM_HANDLER = sh
    _STREAM_HANDLER.setLevel(_level_from_name(level))

    if log_path is None:
        return

    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH == resolved and _FILE_HANDLER is not None:
        return

    if _FILE_HANDLER is not None:
        root.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    Path(resolved).parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(resolved, encoding="utf-8")
    fh.setLevel(_level_from_name(level))
    fh.setFormatter(fmt)
    fh.addFilter(RedactingFilter())
    root.addHandler(fh)

    _FILE_HANDLER = fh
    _CONFIGURED_LOG_PATH = resolved


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by :func:`configure_logging`."""
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH
    root = logging.getLogger()
    for h in (_STREAM_HANDLER, _FILE_HANDLER):
        if h is not None:
            root.removeHandler(h)
            h.close()
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None


__all__ = ["RedactingFilter", "configure_logging", "reset_logging_for_tests"]
