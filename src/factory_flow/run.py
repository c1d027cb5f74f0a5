"""Play-by-play simulation run: wires clock, engine, analysis and sink."""

import logging
from typing import Any, Iterable, List, Optional

from factory_flow.config import SimulationSettings
from factory_flow.models import FlowEdge, FlowNode
from factory_flow.presentation import (
    Notice,
    NoticeKind,
    NullSink,
    PresentationSink,
    TickFrame,
)
from factory_flow.simulation import (
    CompletionReport,
    SimulationClock,
    TokenEngine,
    TokenState,
    UtilizationMode,
    analyze_completion,
)
from factory_flow.topology import (
    FlowGraph,
    NoEntryPointError,
    ResolvedTopology,
)

logger = logging.getLogger(__name__)


class PlayByPlaySimulation:
    """Controller for one play-by-play animation of a flow graph.

    The host (a rendering loop, or the headless SimPy driver) calls
    ``tick()`` with wall-clock frame deltas. Everything runs synchronously
    on the caller's thread; the object is not internally synchronized.
    """

    def __init__(
        self,
        graph: FlowGraph,
        sink: Optional[PresentationSink] = None,
        settings: Optional[SimulationSettings] = None,
    ):
        """Initialize the simulation.

        Args:
            graph: Flow graph owner; snapshotted at every start()
            sink: Presentation consumer (defaults to a NullSink)
            settings: Simulation settings (defaults if None)
        """
        self.graph = graph
        self.sink = sink or NullSink()
        self.settings = settings or SimulationSettings()
        self.clock = SimulationClock(self.settings.speed)

        self.topology: Optional[ResolvedTopology] = None
        self.report: Optional[CompletionReport] = None
        self._engine: Optional[TokenEngine] = None
        self._nodes: List[FlowNode] = []

    @classmethod
    def from_lists(
        cls,
        nodes: Iterable[FlowNode],
        edges: Iterable[FlowEdge],
        sink: Optional[PresentationSink] = None,
        settings: Optional[SimulationSettings] = None,
    ) -> "PlayByPlaySimulation":
        """Create a simulation from plain node and edge lists."""
        return cls(FlowGraph(nodes, edges), sink=sink, settings=settings)

    @property
    def is_running(self) -> bool:
        """True between start() and completion or stop()."""
        return self.clock.running

    @property
    def tokens(self) -> List[TokenState]:
        """Currently active tokens, in processing order."""
        return list(self._engine.tokens) if self._engine else []

    @property
    def elapsed(self) -> float:
        """Simulated seconds since start()."""
        return self.clock.elapsed

    def start(self) -> None:
        """Begin a run from the graph's current nodes and edges.

        Raises:
            NoEntryPointError: If the flow has no start node. The sink is
                notified and no run is started.
        """
        if self.is_running:
            self.stop()

        nodes = self.graph.get_nodes()
        edges = self.graph.get_edges()
        try:
            topology = self.graph.resolve()
        except NoEntryPointError as e:
            logger.warning("Simulation not started: %s", e)
            self.sink.notify(
                Notice(
                    kind=NoticeKind.NO_ENTRY_POINT,
                    title="Simulation Error",
                    message=str(e),
                )
            )
            raise

        self._nodes = nodes
        self.topology = topology
        self.report = None
        self._engine = TokenEngine(
            nodes,
            edges,
            topology,
            default_group_cycle_time=self.settings.default_group_cycle_time,
        )
        self.clock.start()
        logger.info(
            "Simulation started: %d start node(s), speed x%s",
            len(topology.start_node_ids),
            self.clock.speed,
        )

    def stop(self) -> None:
        """Stop the run and reset all presentation state. Idempotent."""
        was_running = self.is_running
        self.clock.stop()
        if self._engine is not None:
            self._engine.clear()
            self._engine = None

        self.sink.reset(
            [n.id for n in self.graph.get_nodes()],
            [e.id for e in self.graph.get_edges()],
        )
        self.sink.update_unit_position(None)

        if was_running:
            logger.info("Simulation stopped at t=%.3fs", self.clock.elapsed)
            self.sink.notify(
                Notice(
                    kind=NoticeKind.STOPPED,
                    title="Simulation Stopped",
                    message="The play-by-play simulation was stopped.",
                )
            )

    def set_speed(self, speed: float) -> None:
        """Change the speed multiplier; applies from the next tick."""
        self.clock.set_speed(speed)

    def tick(self, delta_seconds: float) -> Optional[TickFrame]:
        """Advance the run by one frame.

        Args:
            delta_seconds: Wall-clock seconds since the previous frame

        Returns:
            The rendered TickFrame, or None if the frame was discarded
        """
        if self._engine is None:
            return None
        dt = self.clock.tick(delta_seconds)
        if dt is None:
            return None

        frame = self._engine.advance(dt)
        self.sink.render_frame(frame)
        self.sink.update_unit_position(frame.unit_position)

        if self._engine.is_finished:
            self._complete()
        return frame

    def update_edge(self, edge_id: str, **patch: Any) -> FlowEdge:
        """Update an edge on the graph; takes effect at the next start()."""
        edge = self.graph.update_edge(edge_id, **patch)
        if self.is_running:
            logger.info("Edge %s updated during a run; applies on next start", edge_id)
        return edge

    def remove_node(self, node_id: str) -> FlowNode:
        """Remove a node from the graph, dropping units that reach it."""
        node = self.graph.remove_node(node_id)
        self._nodes = [n for n in self._nodes if n.id != node_id]
        if self._engine is not None:
            self._engine.discard_node(node_id)
        return node

    def _complete(self) -> None:
        self.clock.stop()
        self.report = analyze_completion(
            self._nodes, self.topology, self.settings.utilization_mode
        )
        logger.info(
            "Simulation complete after %.3fs: bottleneck %s",
            self.clock.elapsed,
            self.report.bottleneck_id,
        )
        self.sink.show_completion(self.report)
        self.sink.notify(
            Notice(
                kind=NoticeKind.COMPLETED,
                title="Simulation Complete",
                message="All units have completed the process flow.",
                bottleneck_id=self.report.bottleneck_id,
            )
        )


def analyze_instant(
    graph: FlowGraph, mode: UtilizationMode = UtilizationMode.TWO_PASS
) -> CompletionReport:
    """Compute utilization and bottleneck without animating units.

    Raises:
        NoEntryPointError: If the flow has no start node
    """
    topology = graph.resolve()
    return analyze_completion(graph.get_nodes(), topology, mode)
