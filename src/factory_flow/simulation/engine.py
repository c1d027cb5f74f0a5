"""Token engine: advances flow tokens through a resolved topology."""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set

from factory_flow.models import FlowEdge, FlowNode
from factory_flow.presentation import (
    EdgeSnapshot,
    NodeSnapshot,
    TickFrame,
    UnitPosition,
)
from factory_flow.simulation.tokens import AtNode, InTransit, TokenState
from factory_flow.topology import ResolvedTopology

logger = logging.getLogger(__name__)

# Cycle time used by a group none of whose children has timing data
DEFAULT_GROUP_CYCLE_TIME = 1.0


class TokenEngine:
    """State machine over the set of active flow tokens.

    One token is placed on every start node. Each ``advance()`` moves every
    token forward in a stable order, then reports a TickFrame reflecting the
    state after all tokens have moved.

    A node that completes a unit sends one new unit down *each* outgoing
    edge: fan-out duplicates units rather than splitting them.
    """

    def __init__(
        self,
        nodes: Iterable[FlowNode],
        edges: Iterable[FlowEdge],
        topology: ResolvedTopology,
        default_group_cycle_time: float = DEFAULT_GROUP_CYCLE_TIME,
    ):
        """Initialize the engine.

        Args:
            nodes: Node snapshot for the run, in display order
            edges: Edge snapshot for the run, in display order
            topology: Resolved topology for the same nodes and edges
            default_group_cycle_time: Group cycle time when no child has data
        """
        self.topology = topology
        self.default_group_cycle_time = default_group_cycle_time
        self._nodes: Dict[str, FlowNode] = {n.id: n for n in nodes}
        self._edge_ids: List[str] = [e.id for e in edges]

        self.tokens: List[TokenState] = [
            AtNode(node_id) for node_id in topology.start_node_ids
        ]
        self.tick_count = 0
        self.elapsed = 0.0

    @property
    def is_finished(self) -> bool:
        """True once no tokens remain active."""
        return not self.tokens

    @property
    def node_ids(self) -> List[str]:
        """Ids of nodes known to this run, in display order."""
        return list(self._nodes)

    @property
    def edge_ids(self) -> List[str]:
        """Ids of edges known to this run, in display order."""
        return list(self._edge_ids)

    def clear(self) -> None:
        """Drop every active token."""
        self.tokens = []

    def discard_node(self, node_id: str) -> None:
        """Forget a node removed mid-run; tokens reaching it are dropped."""
        self._nodes.pop(node_id, None)

    def cycle_time_of(self, node: FlowNode) -> float:
        """Effective cycle time used to process one unit at a node.

        Groups process their children concurrently and complete as fast as
        their fastest child.
        """
        if not node.is_group:
            return node.effective_cycle_time

        child_times = [
            self._nodes[child_id].effective_cycle_time
            for child_id in self.topology.children_of(node.id)
            if child_id in self._nodes
        ]
        if not child_times:
            return self.default_group_cycle_time
        return min(child_times)

    def advance(self, dt: float) -> TickFrame:
        """Advance every active token by ``dt`` simulated seconds.

        Returns:
            TickFrame describing node and edge activity after the tick
        """
        next_tokens: List[TokenState] = []
        active_node_ids: Set[str] = set()
        transit_edges: Dict[str, float] = {}

        for token in self.tokens:
            if isinstance(token, InTransit):
                self._advance_transit(token, dt, next_tokens, active_node_ids, transit_edges)
            elif isinstance(token, AtNode):
                self._advance_at_node(token, dt, next_tokens, active_node_ids)
            else:
                raise TypeError(f"Unknown token state: {type(token).__name__}")

        self.tokens = next_tokens
        self.tick_count += 1
        self.elapsed += dt
        return self._build_frame(active_node_ids, transit_edges)

    def _advance_transit(
        self,
        token: InTransit,
        dt: float,
        next_tokens: List[TokenState],
        active_node_ids: Set[str],
        transit_edges: Dict[str, float],
    ) -> None:
        if token.transit_time > 0:
            transit_progress = token.transit_progress + dt / token.transit_time
        elif dt > 0:
            transit_progress = 1.0
        else:
            # Frozen clock
            transit_progress = token.transit_progress

        if transit_progress < 1:
            next_tokens.append(replace(token, transit_progress=transit_progress))
            transit_edges[token.edge_id] = transit_progress
            return

        # Arrival
        target = self._nodes.get(token.to_node_id)
        if target is None:
            logger.debug(
                "Dropping unit arriving at unknown node %s via %s",
                token.to_node_id,
                token.edge_id,
            )
            return

        next_tokens.append(AtNode(target.id))
        active_node_ids.add(target.id)
        if target.is_group:
            active_node_ids.update(self.topology.children_of(target.id))

    def _advance_at_node(
        self,
        token: AtNode,
        dt: float,
        next_tokens: List[TokenState],
        active_node_ids: Set[str],
    ) -> None:
        node = self._nodes.get(token.node_id)
        if node is None:
            logger.debug("Dropping unit at unknown node %s", token.node_id)
            return

        active_node_ids.add(node.id)
        if node.is_group:
            active_node_ids.update(self.topology.children_of(node.id))

        cycle_time = self.cycle_time_of(node)
        if cycle_time > 0:
            progress = token.progress + dt / cycle_time
        elif dt > 0:
            logger.debug("Node %s has no cycle time; completing instantly", node.id)
            progress = 1.0
        else:
            progress = token.progress

        if progress < 1:
            next_tokens.append(replace(token, progress=progress))
            return

        # Completion: consume at a sink, otherwise fan out along every edge
        for route in self.topology.routes_from(node.id):
            next_tokens.append(
                InTransit(
                    from_node_id=node.id,
                    to_node_id=route.target_id,
                    edge_id=route.edge_id,
                    transit_time=route.transit_time,
                )
            )

    def _build_frame(
        self, active_node_ids: Set[str], transit_edges: Dict[str, float]
    ) -> TickFrame:
        node_progress: Dict[str, float] = {}
        for token in self.tokens:
            if isinstance(token, AtNode):
                node_progress.setdefault(token.node_id, token.progress)

        nodes = [
            NodeSnapshot(
                id=node_id,
                active=node_id in active_node_ids,
                progress=node_progress.get(node_id),
            )
            for node_id in self._nodes
        ]
        edges = [
            EdgeSnapshot(
                id=edge_id,
                transit_in_progress=edge_id in transit_edges,
                transit_progress=transit_edges.get(edge_id, 0.0),
            )
            for edge_id in self._edge_ids
        ]
        return TickFrame(
            tick=self.tick_count,
            sim_time=self.elapsed,
            nodes=nodes,
            edges=edges,
            unit_position=self.primary_position(),
        )

    def primary_position(self) -> Optional[UnitPosition]:
        """Position of the first unit (in token order) that is at a node."""
        for token in self.tokens:
            if isinstance(token, AtNode):
                return UnitPosition(node_id=token.node_id, progress=token.progress)
        return None
