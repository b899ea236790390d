"""
Structured logging for the issuer.

structlog on top of the stdlib ``logging`` backend, JSON output when
``json_logs`` is set and a console renderer otherwise.  Output goes to
stderr; stdout is reserved for the CLI's confirmation and metrics lines.

Usage:
    from crcs.logger import get_logger, setup_logging

    setup_logging("INFO")
    logger = get_logger(__name__)
    logger.info("credential_issued", credential_id=cid, attributes=["age"])
"""

from __future__ import annotations

import datetime
import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# exact key names carrying secret material
_SECRET_KEYS = frozenset({"x1", "x2", "r", "seed", "secret", "secret_key", "shares"})

# silent until setup_logging attaches a handler to the root logger
logging.getLogger("crcs").addHandler(logging.NullHandler())


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Add service-level context to all log entries."""
    from . import __version__

    event_dict.setdefault("service", "crcs-issuer")
    event_dict.setdefault("version", __version__)
    return event_dict


def _add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def _censor_secrets(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Never let shares, blinding factors or signing keys reach a log sink."""

    def censor(d: Dict[str, Any]) -> Dict[str, Any]:
        result = {}
        for key, value in d.items():
            if key.lower() in _SECRET_KEYS:
                result[key] = "***REDACTED***"
            elif isinstance(value, dict):
                result[key] = censor(value)
            else:
                result[key] = value
        return result

    return censor(event_dict)


def setup_logging(log_level: str = "WARNING", json_logs: bool = False) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: render JSON lines instead of console output
    """
    level = getattr(logging, str(log_level).upper())

    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_timestamp,
        _add_service_context,
        _censor_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: Optional[str] = None) -> "BoundLogger":
    """
    Structured logger for *name* (typically ``__name__``).

    Always backed by a stdlib logger, so events follow the stdlib
    handler tree even before ``setup_logging`` has configured structlog.
    """
    return structlog.wrap_logger(logging.getLogger(name or "crcs"))
