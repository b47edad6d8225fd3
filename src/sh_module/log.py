from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import ModuleConfig

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def fields(**kv: Any) -> dict[str, Any]:
    """Build the `extra` mapping that carries structured key/value pairs.

    Example:
        ```python
        logger.info("Invoke called", extra=fields(method="Run", args=["ls"]))
        ```
    """
    return {"fields": kv}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line with `@`-prefixed core keys.

    Example:
        ```python
        handler.setFormatter(JsonFormatter())
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize one record.

        Example:
            ```python
            line = JsonFormatter().format(record)
            ```
        """
        payload: dict[str, Any] = {
            "@level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "@message": record.getMessage(),
            "@module": record.name,
            "@timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        }
        extra = getattr(record, "fields", None)
        if isinstance(extra, dict):
            for key, value in extra.items():
                payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class KeyValueFormatter(logging.Formatter):
    """Append structured fields to the message as `key=value` pairs.

    Example:
        ```python
        rich_handler.setFormatter(KeyValueFormatter())
        ```
    """

    def formatMessage(self, record: logging.LogRecord) -> str:
        """Render the message followed by its fields.

        RichHandler calls this directly when it draws tracebacks itself.

        Example:
            ```python
            text = KeyValueFormatter().formatMessage(record)  # "Invoke called method='Run' args=['ls']"
            ```
        """
        message = super().formatMessage(record)
        extra = getattr(record, "fields", None)
        if not isinstance(extra, dict) or not extra:
            return message
        pairs = " ".join(f"{key}={value!r}" for key, value in extra.items())
        return f"{message} {pairs}"


def build_logger(config: ModuleConfig, stream: TextIO | None = None) -> logging.Logger:
    """Create the module logger described by `config`.

    Handlers are replaced on every call so repeated construction does not duplicate output.

    Example:
        ```python
        logger = build_logger(ModuleConfig(log_format="rich"))
        ```
    """
    target = stream if stream is not None else sys.stderr
    logger = logging.getLogger(config.name)
    logger.setLevel(config.log_level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)

    handler: logging.Handler
    if config.log_format == "rich":
        handler = RichHandler(
            console=Console(file=target),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(KeyValueFormatter())
    else:
        handler = logging.StreamHandler(target)
        handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger
