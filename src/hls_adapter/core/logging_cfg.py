"""Logging setup for the adapter.

Every record is written to stdout as one JSON object. Structured fields passed
with ``extra=`` (for example the variant count and the chosen policy) become
top-level keys next to the standard ones, so log pipelines can filter on them.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

# Attributes every LogRecord carries; anything else on a record came from ``extra=``
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

_STANDARD_KEYS: frozenset[str] = frozenset({"level", "time", "message", "logger", "where", "exc"})


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    return str(value)


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields attached to ``record``, made JSON-serializable."""

    return {
        key: _json_safe(value)
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    Notes
    -----
    - ``where`` is ``module:function:line`` of the call site.
    - Extra fields never overwrite the standard keys; a clashing extra is
      emitted with an ``extra_`` prefix instead.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "message": record.getMessage(),
            "logger": record.name,
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        for key, value in extra_fields(record).items():
            payload[f"extra_{key}" if key in _STANDARD_KEYS else key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(debug: bool, stream: TextIO | None = None) -> None:
    """Install the JSON formatter on the root logger.

    Parameters
    ----------
    debug: bool
        Log at DEBUG instead of INFO, and keep uvicorn access lines.
    stream: TextIO | None
        Destination; defaults to ``sys.stdout``.
    """

    level: int = logging.DEBUG if debug else logging.INFO
    handler: logging.Handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level if debug else logging.WARNING)
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
