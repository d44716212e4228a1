"""
Structured logging configuration using structlog.

Stdlib loggers and structlog loggers share one handler on the root logger.
Structured fields that carry wallet key material are masked before
rendering; free-text messages are not inspected, so never interpolate a key
into one.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog

from .config import settings


REDACTED = "[redacted]"

KEY_MATERIAL_FIELDS = frozenset({
    "private_key",
    "encrypted_key",
    "auth_tag",
    "iv",
    "wallet_encryption_key",
})

# web3 logs full RPC payloads at DEBUG, signed transactions included
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "web3", "anthropic")


def redact_key_material(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for name in KEY_MATERIAL_FIELDS.intersection(event_dict):
        event_dict[name] = REDACTED
    return event_dict


def setup_logging(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Route all logging through structlog.

    Args:
        log_level: Override log level (default: settings.log_level)
        json_logs: Force JSON or console rendering. By default the console
            renderer is only used for DEBUG outside production.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = settings.is_production or level != logging.DEBUG

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_key_material,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain lets plain logging.getLogger(...) records get the
    # same context, level and redaction as structlog ones
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
