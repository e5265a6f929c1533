"""Tests for the stage graph error taxonomy."""

from __future__ import annotations

import pytest

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
    StageGraphError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "parent"),
        [
            (GraphValidationError, StageGraphError),
            (ConstructionError, GraphValidationError),
            (CycleError, GraphValidationError),
            (NoSourceError, CycleError),
            (NoSinkError, CycleError),
            (IslandError, GraphValidationError),
            (GraphMutationError, StageGraphError),
            (MissingNodeError, GraphMutationError),
            (MissingNodeError, KeyError),
            (DuplicateNodeError, GraphMutationError),
            (StageGraphError, ValueError),
        ],
    )
    def test_subclass(self, error: type[Exception], parent: type[Exception]) -> None:
        assert issubclass(error, parent)

    def test_mutation_errors_are_not_validation_errors(self) -> None:
        assert not issubclass(DuplicateNodeError, GraphValidationError)
        assert not issubclass(MissingNodeError, GraphValidationError)


class TestMessages:
    def test_cycle_lists_stages_sorted(self) -> None:
        error = CycleError(["c", "a", "b"])

        assert error.stages == {"a", "b", "c"}
        assert str(error) == "Invalid stage graph. Stages a, b, c form a cycle."

    def test_no_source_carries_cycle(self) -> None:
        error = NoSourceError({"y", "x"})

        assert error.stages == {"x", "y"}
        assert str(error) == "Stage graph does not have any sources. Remove the cycle formed by stages x, y."

    def test_no_sink_carries_cycle(self) -> None:
        error = NoSinkError(iter(["x"]))

        assert error.stages == {"x"}
        assert "does not have any sinks" in str(error)

    def test_island(self) -> None:
        error = IslandError(["b", "a"])

        assert error.stages == {"a", "b"}
        assert str(error) == (
            "Invalid stage graph. There is an island made up of stages a, b (no other stages connect to them)."
        )

    def test_missing_node_str_is_not_quoted(self) -> None:
        error = MissingNodeError("x")

        assert error.stage == "x"
        assert str(error) == "Stage 'x' does not exist in the graph."

    def test_duplicate_node(self) -> None:
        error = DuplicateNodeError("x")

        assert error.stage == "x"
        assert str(error) == "Cannot insert stage 'x' because it already exists."
