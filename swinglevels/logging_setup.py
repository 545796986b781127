"""Structured JSON logging tagged with the symbol under evaluation.

Engine modules log through ``logging.getLogger(__name__)`` and pass their
payload via ``extra=``; the formatter nests those fields under ``"extra"``.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
    "symbol",
}

SYMBOL_CONTEXT: ContextVar[str | None] = ContextVar("symbol", default=None)


@contextmanager
def symbol_context(symbol: str | None) -> Iterator[None]:
    """Tag every record emitted inside the block with ``symbol``."""

    token = SYMBOL_CONTEXT.set((symbol or "").upper() or None)
    try:
        yield
    finally:
        SYMBOL_CONTEXT.reset(token)


class SymbolFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.symbol = SYMBOL_CONTEXT.get()
        return True


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, symbol, extra."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        symbol = getattr(record, "symbol", None)
        if symbol:
            payload["symbol"] = symbol
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str, separators=(",", ":"))


_CONFIGURED = False


def setup_logging(level: int | str | None = None, *, json_output: bool | None = None) -> None:
    """Configure root logging once; defaults come from the engine settings."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    from .config import get_settings

    settings = get_settings()
    handler = logging.StreamHandler(stream=sys.stdout)
    if settings.log_json if json_output is None else json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(symbol)s] %(message)s"))
    handler.addFilter(SymbolFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level if level is not None else settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logging.captureWarnings(True)
    _CONFIGURED = True


__all__ = ["SYMBOL_CONTEXT", "SymbolFilter", "JsonFormatter", "setup_logging", "symbol_context"]
