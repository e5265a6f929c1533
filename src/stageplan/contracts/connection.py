"""Connection contract: a directed edge between two pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass

from stageplan.contracts.types import StageName


@dataclass(frozen=True, slots=True)
class Connection:
    """A directed connection from one stage to another.

    Produced by whatever parses the pipeline definition and consumed by
    StageGraph.from_connections(). Equal connections collapse into a
    single edge.
    """

    from_stage: StageName
    to_stage: StageName

    @classmethod
    def of(cls, from_stage: str, to_stage: str) -> Connection:
        """Build a connection from plain strings."""
        return cls(StageName(from_stage), StageName(to_stage))

    def as_tuple(self) -> tuple[StageName, StageName]:
        return (self.from_stage, self.to_stage)

    def __str__(self) -> str:
        return f"{self.from_stage} -> {self.to_stage}"
