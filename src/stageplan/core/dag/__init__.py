# src/stageplan/core/dag/__init__.py
"""DAG (Directed Acyclic Graph) operations for pipeline stage planning."""

from stageplan.core.dag.graph import ConnectionLike, StageGraph
from stageplan.core.dag.models import (
    ConstructionError,
    CycleError,
    DuplicateNodeError,
    GraphMutationError,
    GraphValidationError,
    IslandError,
    MissingNodeError,
    NoSinkError,
    NoSourceError,
    StageGraphError,
)

__all__ = [
    "ConnectionLike",
    "ConstructionError",
    "CycleError",
    "DuplicateNodeError",
    "GraphMutationError",
    "GraphValidationError",
    "IslandError",
    "MissingNodeError",
    "NoSinkError",
    "NoSourceError",
    "StageGraph",
    "StageGraphError",
]
