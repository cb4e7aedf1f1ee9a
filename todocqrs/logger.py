"""Structured JSON logging with per-call file and function fields."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any, MutableMapping, TextIO

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


class JsonFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = dict(getattr(record, "fields", {}) or {})
        payload["level"] = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        payload["msg"] = record.getMessage()
        payload["time"] = (
            datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="seconds")
        )
        return json.dumps(payload, sort_keys=True)


class _FieldsAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {"fields": self.extra}
        return msg, kwargs


class Logger:
    """A debug-level JSON logger writing to a stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None, name: str = "todocqrs") -> None:
        self._logger = logging.Logger(name, logging.DEBUG)
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(JsonFormatter())
        self._logger.addHandler(handler)

    def start_logger(self, file_name: str, func_name: str) -> logging.LoggerAdapter:
        return _FieldsAdapter(self._logger, {"file": file_name, "func": func_name})