# src/stageplan/core/logging.py
"""Structured logging configuration for stageplan.

Graph operations emit debug events ("Stage graph validated", "Inserted
stage", ...) through loggers from get_logger(). Nothing is rendered until
the embedding planner calls configure_logging(), usually via
configure_logging_from_settings() with its PlannerSettings.

Architecture:
    structlog and stdlib logging share one ProcessorFormatter, so a planner
    that logs with logging.getLogger(__name__) lines up with the graph's own
    events. Every record carries the emitting logger's name, which lets
    callers filter graph events ("stageplan.core.dag.graph") from their own.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.stdlib import ProcessorFormatter

if TYPE_CHECKING:
    from stageplan.core.config import PlannerSettings


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove internal structlog fields from output.

    ProcessorFormatter always adds _record and _from_structlog when
    processing log records. They are bookkeeping, not output.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _sort_stage_sets(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Render set-valued fields (graph.sources, reachable sets) as sorted lists.

    JSONRenderer cannot serialize sets, and sorted output keeps log lines
    stable between runs.
    """
    for key, value in event_dict.items():
        if isinstance(value, (set, frozenset)):
            event_dict[key] = sorted(value)
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog and stdlib logging for stageplan.

    Safe to call repeatedly; each call replaces the root handlers.

    Args:
        json_output: If True, output JSON. If False, human-readable.
        level: Log level (DEBUG, INFO, WARNING, ERROR). DEBUG shows the
            graph's construction and mutation events.
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        _sort_stage_sets,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers in graph.py are created at import time
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)


def configure_logging_from_settings(settings: PlannerSettings) -> None:
    """Apply the log_level and json_logs fields of PlannerSettings."""
    configure_logging(json_output=settings.json_logs, level=settings.log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Bound structlog logger.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
