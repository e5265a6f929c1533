# src/stageplan/core/__init__.py
"""Core infrastructure: stage DAG, configuration, logging."""

from stageplan.core.config import PlannerSettings, load_settings
from stageplan.core.dag import (
    ConstructionError,
    CycleError,
    DuplicateNodeError,
    GraphMutationError,
    GraphValidationError,
    IslandError,
    MissingNodeError,
    NoSinkError,
    NoSourceError,
    StageGraph,
    StageGraphError,
)
from stageplan.core.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)

__all__ = [
    "ConstructionError",
    "CycleError",
    "DuplicateNodeError",
    "GraphMutationError",
    "GraphValidationError",
    "IslandError",
    "MissingNodeError",
    "NoSinkError",
    "NoSourceError",
    "PlannerSettings",
    "StageGraph",
    "StageGraphError",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "load_settings",
]
