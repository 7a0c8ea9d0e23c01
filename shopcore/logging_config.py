"""Structured logging configuration for shopcore.

Uses structlog for structured, context-rich logging. Every record carries
the service name so publish records from several services can share a sink.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog


def _add_service(service_name: str) -> structlog.types.Processor:
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    service_name: str = "shopcore",
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of console output
        log_file: Optional file to append to (stderr otherwise)
        service_name: Value of the ``service`` key on every record
    """
    stream: TextIO = sys.stderr
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        stream = open(log_file, "a")  # noqa: SIM115

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level.upper()),
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_service(service_name),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer(default=repr))
    else:
        # Escape codes only make sense on a terminal
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def configure_from_context(context) -> None:
    """Configure logging from an ``AppContext``."""
    configure_logging(
        level=context.log_level,
        json_output=context.log_json,
        log_file=context.log_file,
        service_name=context.service_name,
    )
