"""Structured logging for Progress Engine.

Engine modules emit events through structlog; this module decides where
those events end up. Rendering happens in a ``ProcessorFormatter`` on the
stdlib handler, so every event (including its traceback) is written as one
JSON object or one console entry, and records from plain ``logging``
callers go through the same renderer.

Each CLI invocation gets a run ID that is attached to every event it
emits, together with the ID of the project being processed:

    >>> setup_logging(LoggingConfig(level="INFO", format="json"), stream=sys.stderr)
    >>> start_run()
    '5f0c...'
    >>> bind_project_context("solar-001")
    >>> get_logger(__name__).info("project_loaded", activities=30)
"""

from __future__ import annotations

import contextvars
import logging
import logging.handlers
import sys
import uuid
from typing import Any, TextIO

import structlog

from progress_engine.config import LoggingConfig

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)


def add_run_id(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor adding the current run ID, when one is set."""
    run_id = _run_id.get()
    if run_id is not None:
        event_dict["run_id"] = run_id
    return event_dict


def start_run(run_id: str | None = None) -> str:
    """Start a new run in the current context and return its ID.

    Args:
        run_id: ID to use; a random hex UUID is generated when omitted.
    """
    run_id = run_id or uuid.uuid4().hex
    _run_id.set(run_id)
    return run_id


def end_run() -> None:
    """Clear the run ID and any bound project context."""
    _run_id.set(None)
    structlog.contextvars.clear_contextvars()


def get_run_id() -> str | None:
    return _run_id.get()


def bind_project_context(project_id: str) -> None:
    """Attach ``project_id`` to every later event in this context."""
    structlog.contextvars.bind_contextvars(project_id=project_id)


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        add_run_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def setup_logging(config: LoggingConfig, stream: TextIO | None = None) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        config: Logging section of the engine configuration.
        stream: Destination when no log file is configured; stdout by
            default. The CLI passes stderr to keep stdout for results.
    """
    level = getattr(logging, config.level)

    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            filename=config.file,
            maxBytes=config.rotation_size_mb * 1024 * 1024,
            backupCount=config.retention_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)

    if config.format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    # Tracebacks are already rendered into the event; the formatter drops
    # the record's exc_info so they are not written a second time.
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
