# src/stageplan/core/dag/models.py
"""Exceptions for stage graph construction, validation and mutation.

Leaf module - no intra-package imports beyond contracts (prevents import cycles).
"""

from __future__ import annotations

from collections.abc import Iterable

from stageplan.contracts.types import StageName


def _format_stages(stages: Iterable[str]) -> str:
    return ", ".join(sorted(stages))


class StageGraphError(ValueError):
    """Base class for every error raised by the stage graph."""

    pass


class GraphValidationError(StageGraphError):
    """Raised when a connection set does not form a valid pipeline DAG."""

    pass


class ConstructionError(GraphValidationError):
    """Raised when a graph cannot be built at all (no connections, bad names)."""

    pass


class CycleError(GraphValidationError):
    """Raised when stages form a cycle.

    Attributes:
        stages: Every stage reachable from the first stage left on a cycle
            once all sources and sinks are stripped: the cycle itself plus
            whatever lies downstream of it.
    """

    def __init__(self, stages: Iterable[str], message: str | None = None) -> None:
        self.stages: frozenset[StageName] = frozenset(StageName(s) for s in stages)
        if message is None:
            message = f"Invalid stage graph. Stages {_format_stages(self.stages)} form a cycle."
        super().__init__(message)


class NoSourceError(CycleError):
    """Raised when no stage is free of inputs, which means a cycle."""

    def __init__(self, stages: Iterable[str]) -> None:
        stages = frozenset(stages)
        super().__init__(
            stages,
            f"Stage graph does not have any sources. Remove the cycle formed by stages {_format_stages(stages)}.",
        )


class NoSinkError(CycleError):
    """Raised when every stage has an output, which means a cycle."""

    def __init__(self, stages: Iterable[str]) -> None:
        stages = frozenset(stages)
        super().__init__(
            stages,
            f"Stage graph does not have any sinks. Remove the cycle formed by stages {_format_stages(stages)}.",
        )


class IslandError(GraphValidationError):
    """Raised when part of the graph is disconnected from the rest.

    Attributes:
        stages: The island discovered first. The other side of the split is
            whatever the graph holds outside this set.
    """

    def __init__(self, stages: Iterable[str]) -> None:
        self.stages: frozenset[StageName] = frozenset(StageName(s) for s in stages)
        super().__init__(
            f"Invalid stage graph. There is an island made up of stages {_format_stages(self.stages)} "
            "(no other stages connect to them)."
        )


class GraphMutationError(StageGraphError):
    """Raised when an in-place edit cannot be applied."""

    pass


class MissingNodeError(GraphMutationError, KeyError):
    """Raised when an operation names a stage the graph does not contain."""

    def __init__(self, stage: str, message: str | None = None) -> None:
        self.stage = StageName(stage)
        super().__init__(message or f"Stage '{stage}' does not exist in the graph.")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class DuplicateNodeError(GraphMutationError):
    """Raised when inserting a stage whose name is already taken."""

    def __init__(self, stage: str) -> None:
        self.stage = StageName(stage)
        super().__init__(f"Cannot insert stage '{stage}' because it already exists.")
