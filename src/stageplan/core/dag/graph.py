# src/stageplan/core/dag/graph.py
"""StageGraph class - construction, validation, traversal and mutation.

Adjacency lives in a NetworkX DiGraph (successors are a stage's outputs,
predecessors its inputs). Sources and sinks are explicit bookkeeping sets
rather than degree queries, because the planner strips stages one at a
time and needs to know which stages became free as a result. Every removal
goes through _remove_node(), the only place promotions happen.

Whenever the graph has to pick "a" stage (the next source during
linearization, the island seed, the cycle to report) it takes the first one
under the configured TieBreak, so results are reproducible run to run.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable

import networkx as nx
from networkx import DiGraph

from stageplan.contracts import Connection, StageName, TieBreak
from stageplan.core.dag.models import (
    ConstructionError,
    CycleError,
    DuplicateNodeError,
    GraphMutationError,
    IslandError,
    MissingNodeError,
    NoSinkError,
    NoSourceError,
)
from stageplan.core.logging import get_logger

logger = get_logger(__name__)

# Callers may hand over Connection objects or plain (from, to) pairs.
type ConnectionLike = Connection | tuple[str, str]

type _HeapEntry = tuple[tuple[int, str], StageName]


def _coerce_connection(item: ConnectionLike) -> Connection:
    """Normalize one connection and reject unusable stage names."""
    if isinstance(item, Connection):
        connection = item
    else:
        if isinstance(item, str):
            raise ConstructionError(f"Connection must be a (from, to) pair, got string {item!r}.")
        try:
            from_stage, to_stage = item
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"Connection must be a Connection or a (from, to) pair, got {item!r}.") from e
        connection = Connection(from_stage, to_stage)

    for stage in connection.as_tuple():
        if not isinstance(stage, str) or not stage:
            raise ConstructionError(f"Stage names must be non-empty strings, got {stage!r} in connection {item!r}.")
    return connection


class StageGraph:
    """Directed acyclic graph of pipeline stages.

    Build instances with from_connections(); the graph is validated before
    it is returned, so every StageGraph a caller holds has at least one
    source and one sink, no cycles and no islands.

    Mutating operations (insert_node, remove_source, remove_sink) edit the
    graph in place. linearize() works on a private copy. Instances are not
    thread-safe; a planning pass should own its graph exclusively.
    """

    def __init__(self, *, tie_break: TieBreak = TieBreak.LEXICOGRAPHIC) -> None:
        self._graph: DiGraph[str] = nx.DiGraph()
        self._tie_break = TieBreak(tie_break)
        self._rank: dict[StageName, int] = {}  # stage -> first-seen position
        self._next_rank = 0
        self._sources: set[StageName] = set()
        self._sinks: set[StageName] = set()
        # Heap entries for stages that have since left the set are skipped on pop.
        self._source_heap: list[_HeapEntry] = []
        self._sink_heap: list[_HeapEntry] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_connections(
        cls,
        connections: Iterable[ConnectionLike],
        *,
        tie_break: TieBreak = TieBreak.LEXICOGRAPHIC,
    ) -> StageGraph:
        """Build and validate a graph from stage connections.

        Args:
            connections: Connection objects or (from, to) pairs. Order only
                matters for TieBreak.INSERTION; duplicates collapse.
            tie_break: Policy for choosing among equally eligible stages.

        Returns:
            A validated StageGraph.

        Raises:
            ConstructionError: If there are no connections or a stage name is unusable.
            NoSourceError: If no stage is free of inputs (implies a cycle).
            NoSinkError: If every stage has an output (implies a cycle).
            CycleError: If stages form a cycle.
            IslandError: If part of the graph is disconnected from the rest.
        """
        graph = cls(tie_break=tie_break)
        for item in connections:
            graph._add_connection(_coerce_connection(item))

        if graph._graph.number_of_edges() == 0:
            raise ConstructionError("Cannot create a stage graph without any connections.")

        graph._compute_endpoints()
        graph.validate()

        logger.debug(
            "Stage graph validated",
            stages=graph.node_count,
            connections=graph.edge_count,
            sources=sorted(graph._sources),
            sinks=sorted(graph._sinks),
        )
        return graph

    def _add_connection(self, connection: Connection) -> None:
        for stage in connection.as_tuple():
            if stage not in self._rank:
                self._rank[stage] = self._next_rank
                self._next_rank += 1
        self._graph.add_edge(connection.from_stage, connection.to_stage)

    def _compute_endpoints(self) -> None:
        """Derive sources and sinks from scratch."""
        self._sources.clear()
        self._sinks.clear()
        self._source_heap.clear()
        self._sink_heap.clear()
        for stage in self._graph.nodes:
            self._refresh_endpoint(StageName(stage))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Validate the graph is acyclic, has sources and sinks, and has no islands.

        Only meaningful before destructive edits like remove_source(); once
        stages have been stripped the remainder can legitimately be split.

        Raises:
            NoSourceError: If there are no sources.
            NoSinkError: If there are no sinks.
            CycleError: If there is a cycle.
            IslandError: If there is an island.
        """
        if not self._sources:
            raise NoSourceError(self._strip()[1])
        if not self._sinks:
            raise NoSinkError(self._strip()[1])

        self.linearize()
        self._check_islands()

    def _check_islands(self) -> None:
        """Grow an island from the first source until it absorbs every source.

        A source joins the island when anything it can reach is already on
        the island. A full pass over the remaining sources that absorbs
        nothing means those sources really are cut off.
        """
        ordered_sources = sorted(self._sources, key=self._sort_key)
        reachable = {source: self.reachable_from(source) for source in ordered_sources}

        island: set[StageName] = set(reachable[ordered_sources[0]])
        candidates = ordered_sources[1:]
        while candidates:
            remaining: list[StageName] = []
            for candidate in candidates:
                if island.isdisjoint(reachable[candidate]):
                    remaining.append(candidate)
                else:
                    island.update(reachable[candidate])
            if len(remaining) == len(candidates):
                raise IslandError(island)
            candidates = remaining

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tie_break(self) -> TieBreak:
        """Policy used when several stages are equally eligible."""
        return self._tie_break

    @property
    def nodes(self) -> frozenset[StageName]:
        return frozenset(StageName(stage) for stage in self._graph.nodes)

    @property
    def sources(self) -> frozenset[StageName]:
        """Stages with no inputs and at least one output."""
        return frozenset(self._sources)

    @property
    def sinks(self) -> frozenset[StageName]:
        """Stages with no outputs and at least one input."""
        return frozenset(self._sinks)

    @property
    def node_count(self) -> int:
        """Number of stages in the graph."""
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        """Number of connections in the graph."""
        return self._graph.number_of_edges()

    def has_node(self, stage: str) -> bool:
        """Check if a stage exists."""
        return self._graph.has_node(stage)

    def get_node_outputs(self, stage: str) -> frozenset[StageName]:
        """Stages the given stage connects to (empty for unknown stages)."""
        if not self._graph.has_node(stage):
            return frozenset()
        return frozenset(self._graph.successors(stage))

    def get_node_inputs(self, stage: str) -> frozenset[StageName]:
        """Stages connecting to the given stage (empty for unknown stages)."""
        if not self._graph.has_node(stage):
            return frozenset()
        return frozenset(self._graph.predecessors(stage))

    def connections(self) -> list[Connection]:
        """Every connection in the graph, in adjacency order.

        Feeding the result back into from_connections() rebuilds an equal graph.
        """
        return [Connection(StageName(u), StageName(v)) for u, v in self._graph.edges]

    def get_nx_graph(self) -> DiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph.

        Mutation attempts on the returned graph raise nx.NetworkXError.
        """
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]

    def reachable_from(self, stage: str, stop_nodes: Iterable[str] = ()) -> frozenset[StageName]:
        """Return every stage reachable from the given stage, including itself.

        Traversal does not go past a stage in stop_nodes: the stop stage is
        part of the result but its outputs are not followed. The starting
        stage is always expanded, even if it is itself a stop stage.

        Args:
            stage: The stage to start at.
            stop_nodes: Stages to stop traversal on.

        Raises:
            MissingNodeError: If the stage does not exist.
        """
        if not self._graph.has_node(stage):
            raise MissingNodeError(stage)

        stops = frozenset(stop_nodes)
        start = StageName(stage)
        seen: set[StageName] = {start}
        stack = [start]
        while stack:
            current = stack.pop()
            for output in self._graph.successors(current):
                if output in seen:
                    continue
                seen.add(output)
                if output not in stops:
                    stack.append(output)
        return frozenset(seen)

    def subset_from(self, stage: str, stop_nodes: Iterable[str] = ()) -> StageGraph:
        """Return the sub-graph induced by the stages reachable from the given stage.

        The result is a new, independently validated StageGraph using the
        same tie-break policy. A stage that reaches nothing yields no
        connections, so callers must handle single-stage phases themselves.

        Args:
            stage: The stage to start at.
            stop_nodes: Stages to stop traversal on.

        Raises:
            MissingNodeError: If the stage does not exist.
            ConstructionError: If the reachable set has no connections.
        """
        reachable = self.reachable_from(stage, stop_nodes)
        induced = self._graph.subgraph(reachable)
        subset = StageGraph.from_connections(
            [Connection(StageName(u), StageName(v)) for u, v in induced.edges],
            tie_break=self._tie_break,
        )
        logger.debug("Extracted stage sub-graph", start=stage, stages=subset.node_count)
        return subset

    # ------------------------------------------------------------------
    # Linearization
    # ------------------------------------------------------------------

    def linearize(self) -> list[StageName]:
        """Return the stages in an order where every stage precedes its outputs.

        Works on a copy; the graph itself is left untouched.

        Raises:
            CycleError: If there is a cycle.
        """
        linearized, cycle = self._strip()
        if cycle:
            raise CycleError(cycle)
        return linearized

    def _strip(self) -> tuple[list[StageName], frozenset[StageName]]:
        """Strip sources off a copy of the graph until none are left.

        Returns:
            The stripped stages in removal order, and the stages reachable
            from the first stage left on a cycle (empty when the whole graph
            was stripped).
        """
        work = self._copy()
        linearized: list[StageName] = []
        removed = work.remove_source()
        while removed is not None:
            linearized.append(removed)
            removed = work.remove_source()

        if work.edge_count == 0:
            return linearized, frozenset()

        # Connections left over means a cycle. Draining sinks leaves only
        # stages on or between cycles to pick the report start from; the
        # report itself is everything that start reaches in the full graph.
        while work.remove_sink() is not None:
            pass
        start = min(
            (StageName(stage) for stage in work._graph.nodes if work._graph.out_degree(stage) > 0),
            key=self._sort_key,
        )
        return linearized, self.reachable_from(start)

    def _copy(self) -> StageGraph:
        """Deep copy of adjacency and bookkeeping. Nothing is shared with self."""
        copy = StageGraph(tie_break=self._tie_break)
        copy._graph = self._graph.copy()
        copy._rank = dict(self._rank)
        copy._next_rank = self._next_rank
        copy._sources = set(self._sources)
        copy._sinks = set(self._sinks)
        copy._source_heap = list(self._source_heap)
        copy._sink_heap = list(self._sink_heap)
        return copy

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def remove_source(self) -> StageName | None:
        """Remove the first source. Sources are re-calculated after the removal.

        Returns:
            The removed source, or None if there were no sources to remove.
        """
        source = self._pop_first(self._source_heap, self._sources)
        if source is None:
            return None
        self._remove_node(source)
        return source

    def remove_sink(self) -> StageName | None:
        """Remove the first sink. Sinks are re-calculated after the removal.

        Returns:
            The removed sink, or None if there were no sinks to remove.
        """
        sink = self._pop_first(self._sink_heap, self._sinks)
        if sink is None:
            return None
        self._remove_node(sink)
        return sink

    def insert_node(self, name: str, in_front_of: str) -> None:
        """Insert a new stage in front of an existing one.

        The new stage takes over every input of in_front_of and becomes its
        only input. If in_front_of was a source, the new stage replaces it
        as a source.

        Args:
            name: The name of the new stage.
            in_front_of: The stage to insert in front of.

        Raises:
            MissingNodeError: If in_front_of does not exist.
            DuplicateNodeError: If name already exists.
        """
        if not self._graph.has_node(in_front_of):
            raise MissingNodeError(
                in_front_of,
                f"Cannot insert in front of stage '{in_front_of}' because it does not exist.",
            )
        if self._graph.has_node(name):
            raise DuplicateNodeError(name)
        if not isinstance(name, str) or not name:
            raise GraphMutationError(f"Stage names must be non-empty strings, got {name!r}.")

        stage = StageName(name)
        target = StageName(in_front_of)
        inputs = list(self._graph.predecessors(target))

        self._rank[stage] = self._next_rank
        self._next_rank += 1
        self._graph.add_node(stage)
        for input_stage in inputs:
            self._graph.remove_edge(input_stage, target)
            self._graph.add_edge(input_stage, stage)
        self._graph.add_edge(stage, target)

        self._refresh_endpoint(stage)
        self._refresh_endpoint(target)

        logger.debug("Inserted stage", stage=stage, in_front_of=target, inputs=sorted(inputs))

    def _remove_node(self, stage: StageName) -> None:
        """Remove a stage and every connection touching it.

        Any output left without inputs becomes a source, and any input left
        without outputs becomes a sink. The stage itself leaves both sets.
        """
        for output in list(self._graph.successors(stage)):
            self._graph.remove_edge(stage, output)
            if self._graph.in_degree(output) == 0:
                self._add_source(output)
        for input_stage in list(self._graph.predecessors(stage)):
            self._graph.remove_edge(input_stage, stage)
            if self._graph.out_degree(input_stage) == 0:
                self._add_sink(input_stage)

        self._graph.remove_node(stage)
        self._sources.discard(stage)
        self._sinks.discard(stage)

    # ------------------------------------------------------------------
    # Bookkeeping helpers
    # ------------------------------------------------------------------

    def _sort_key(self, stage: StageName) -> tuple[int, str]:
        if self._tie_break is TieBreak.INSERTION:
            return (self._rank[stage], stage)
        return (0, stage)

    def _add_source(self, stage: StageName) -> None:
        if stage not in self._sources:
            self._sources.add(stage)
            heapq.heappush(self._source_heap, (self._sort_key(stage), stage))

    def _add_sink(self, stage: StageName) -> None:
        if stage not in self._sinks:
            self._sinks.add(stage)
            heapq.heappush(self._sink_heap, (self._sort_key(stage), stage))

    def _refresh_endpoint(self, stage: StageName) -> None:
        """Recompute source/sink membership of a stage that has connections."""
        has_inputs = self._graph.in_degree(stage) > 0
        has_outputs = self._graph.out_degree(stage) > 0
        if has_outputs and not has_inputs:
            self._add_source(stage)
        else:
            self._sources.discard(stage)
        if has_inputs and not has_outputs:
            self._add_sink(stage)
        else:
            self._sinks.discard(stage)

    @staticmethod
    def _pop_first(heap: list[_HeapEntry], members: set[StageName]) -> StageName | None:
        while heap:
            _, stage = heapq.heappop(heap)
            if stage in members:
                return stage
        return None

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def _edge_set(self) -> frozenset[tuple[str, str]]:
        return frozenset(self._graph.edges)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, StageGraph):
            return NotImplemented
        return (
            self.nodes == other.nodes
            and self._sources == other._sources
            and self._sinks == other._sinks
            and self._edge_set() == other._edge_set()
        )

    def __hash__(self) -> int:
        # Structural: do not mutate a graph while it is used as a mapping key.
        return hash((self.nodes, self.sources, self.sinks, self._edge_set()))

    def __contains__(self, stage: object) -> bool:
        return isinstance(stage, str) and self._graph.has_node(stage)

    def __len__(self) -> int:
        return self.node_count

    def __repr__(self) -> str:
        connections = ", ".join(f"{u}->{v}" for u, v in sorted(self._graph.edges))
        return (
            f"StageGraph(nodes={sorted(self._graph.nodes)}, sources={sorted(self._sources)}, "
            f"sinks={sorted(self._sinks)}, connections=[{connections}])"
        )
