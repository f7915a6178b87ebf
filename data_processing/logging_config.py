"""
Logging setup shared by the preprocessing pipeline, the models package
and the command-line entry point.

Modules log through ``logging.getLogger(__name__)`` and attach pipeline
context with ``extra=``; the formatter renders known context keys as
``key=value`` pairs after the message.
"""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Iterable, Sequence

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

_DEFAULT_EXTRA_KEYS = (
    "source",
    "path",
    "row_count",
    "dropped_rows",
    "drop_rate",
    "duplicates",
    "only_in_a",
    "only_in_b",
    "gap_count",
    "model",
)

_configured = False


class ContextualFormatter(logging.Formatter):

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts: list[str] = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            context_parts.append(f"{key}={value}")
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message


def _read_log_level(default: str) -> str:
    value = os.getenv(LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    return candidate.upper() if candidate else default


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Configure root logging once; later calls are no-ops unless ``force``."""
    global _configured
    if _configured and not force:
        return

    log_level = level if level is not None else _read_log_level(DEFAULT_LOG_LEVEL)
    if isinstance(log_level, str):
        log_level = log_level.upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
