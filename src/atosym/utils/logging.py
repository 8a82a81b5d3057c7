"""Structured logging setup using structlog.

Log events go to stderr so that outcome lines on stdout stay machine-readable.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import IO, Generator

import structlog

from atosym.config.defaults import DEFAULT_LOG_LEVEL


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    json_output: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog for console or JSON rendering.

    JSON events carry an ISO timestamp; console events are kept short since
    they interleave with a resolution trace.
    """
    stream = stream or sys.stderr
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]

    if json_output:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


@contextmanager
def bound_image(image_name: str) -> Generator[None, None, None]:
    """Tag every event logged inside the block with ``image=<image_name>``."""
    with structlog.contextvars.bound_contextvars(image=image_name):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
