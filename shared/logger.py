"""
Keyguard Structured Logger
===========================

:class:`KeyguardLogger` binds a stdlib logger to a Keyguard component and
an optional operation scope. Records go to a Rich handler on stderr and,
when a log file is configured, to a size-rotated file as plain text or as
one JSON object per line.

Keyword arguments passed to the log methods become structured fields::

    log.info("Analysis complete", length=12, score=3)

Only derived values (lengths, scores, counts) are ever logged; a password
never reaches a log record.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich logging handler. https://rich.readthedocs.io/en/stable/logging.html
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_STDERR_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(component)s/%(operation)s] %(message)s"

# logging.Logger keyword arguments that must not be folded into fields
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


# ===================================================================== #
#  Formatters & Handlers
# ===================================================================== #


class JSONLineFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp``, ``level``, ``logger``, ``message``, then
    ``component`` / ``operation`` when bound, ``extra`` for structured
    fields and ``exc_info`` for tracebacks.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(
            (key, getattr(record, key))
            for key in ("component", "operation")
            if getattr(record, key, None) is not None
        )
        fields = getattr(record, "fields", None)
        if fields:
            line["extra"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def _stderr_handler(level: int) -> RichHandler:
    return RichHandler(
        level=level,
        console=Console(theme=_STDERR_THEME, stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def _file_handler(
    path: Path, level: int, as_json: bool, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        JSONLineFormatter() if as_json else logging.Formatter(_TEXT_FORMAT)
    )
    return handler


# ===================================================================== #
#  KeyguardLogger
# ===================================================================== #


class KeyguardLogger:
    """Component-scoped structured logger.

    Usage::

        log = KeyguardLogger("engine", log_file="keyguard.log", json_logs=True)
        with log.operation("analyze"), log.timed("password analysis"):
            ...
        log.info("Analysis complete", length=12)

    Args:
        component:      Name of the Keyguard component; the stdlib logger
                        is ``keyguard.<component>``.
        log_level:      Minimum level name, case-insensitive.
        log_file:       Rotating log file; falsy disables file output.
        json_logs:      Write the file as JSON lines instead of text.
        max_bytes:      Rotation size of the log file.
        backup_count:   Rotated files kept.
        console_output: Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "WARNING",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._operation: str | None = None

        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

        self._logger = logging.getLogger(f"keyguard.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        # Re-created engines must not stack handlers on the shared logger
        for old in list(self._logger.handlers):
            self._logger.removeHandler(old)
            old.close()

        if console_output:
            self._logger.addHandler(_stderr_handler(level))
        if log_file:
            self._logger.addHandler(
                _file_handler(Path(log_file), level, json_logs, max_bytes, backup_count)
            )

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        """The wrapped :class:`logging.Logger`."""
        return self._logger

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[KeyguardLogger]:
        """Tag records emitted inside the block with *name*; scopes nest."""
        outer, self._operation = self._operation, name
        try:
            yield self
        finally:
            self._operation = outer

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log the wall-clock duration of the block at DEBUG level."""
        start = time.perf_counter()
        self.debug("Started: %s", label)
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.debug("Completed: %s (%.3f sec)", label, elapsed, elapsed=elapsed)

    # ------------------------------------------------------------------ #
    #  Emitters
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _LOGGING_KWARGS}
        extra = {
            "component": self._component,
            "operation": self._operation,
            "fields": kwargs,
        }
        passthrough.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, extra=extra, **passthrough)

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, args, fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.INFO, msg, args, fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.WARNING, msg, args, fields)

    def error(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.ERROR, msg, args, fields)
