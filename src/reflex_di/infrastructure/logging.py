"""Structured logging configuration for applications embedding reflex-di."""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from reflex_di.infrastructure.config.settings import ContainerSettings


def configure_logging(settings: Optional[ContainerSettings] = None) -> structlog.stdlib.BoundLogger:
    """Route structlog and stdlib logging through a single stdout handler.

    The library only emits events; call this from an application entry point
    when no other logging setup exists.
    """
    settings = settings if settings is not None else ContainerSettings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger("reflex_di")
    library_logger.handlers.clear()
    library_logger.addHandler(handler)
    library_logger.setLevel(settings.log_level.upper())

    return structlog.get_logger("reflex_di")
