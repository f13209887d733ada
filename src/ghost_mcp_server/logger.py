"""Logging setup for the server process and the sync tools.

Under the MCP stdio transport stdout carries JSON-RPC frames, so the
``mcp`` mode writes to a file only. The ``cli`` mode logs to stderr and can
mirror records to a file as well.
"""

import json
import logging
import os
import sys

DEFAULT_MCP_LOG_FILE = "/tmp/ghost-mcp-server.log"

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_PLAIN = "[%(asctime)s] [%(levelname)s] %(message)s"
_NAMED = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"

# requests pulls these in; their per-connection chatter drowns sync logs
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``.

    A formatted traceback goes under ``exc`` when the record carries one.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _resolve_level(mode: str, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    fallback = "WARNING" if mode == "mcp" else "INFO"
    name = os.getenv("LOG_LEVEL", fallback).upper()
    return getattr(logging, name, logging.INFO)


def _handler(
    handler: logging.Handler, debug_format: str, fmt: str
) -> logging.Handler:
    if debug_format == "json":
        handler.setFormatter(JsonFormatter(datefmt=_DATEFMT))
    else:
        handler.setFormatter(logging.Formatter(fmt, datefmt=_DATEFMT))
    return handler


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
) -> None:
    """
    Configure the root logger for the given execution mode.

    Args:
        mode: ``"mcp"`` logs to a file only; ``"cli"`` logs to stderr.
        debug: Force DEBUG regardless of ``LOG_LEVEL``.
        log_file: Log file path. In ``mcp`` mode it beats ``LOG_FILE``; in
            ``cli`` mode it adds a file handler next to stderr.
        debug_format: ``"text"`` or ``"json"`` (``cli`` mode only).

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. WARNING is the default
                   for ``mcp`` mode and INFO for ``cli`` mode.
        LOG_FILE: Log file for ``mcp`` mode, defaulting to
                  ``/tmp/ghost-mcp-server.log``.
    """
    level = _resolve_level(mode, debug)

    if mode == "mcp":
        logging.basicConfig(
            level=level,
            format=_NAMED,
            datefmt=_DATEFMT,
            filename=log_file or os.getenv("LOG_FILE", DEFAULT_MCP_LOG_FILE),
            filemode="a",
        )
    else:
        handlers = [
            _handler(logging.StreamHandler(sys.stderr), debug_format, _PLAIN)
        ]
        if log_file:
            handlers.append(
                _handler(
                    logging.FileHandler(log_file, mode="a"),
                    debug_format,
                    _NAMED,
                )
            )
        logging.basicConfig(level=level, handlers=handlers)

    if level != logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
