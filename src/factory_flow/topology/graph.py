"""Graph-based topology for factory flow simulation.

Supports:
- Branching (one node feeding multiple nodes, in edge order)
- Merging (multiple nodes feeding one node)
- Sub-flow groups (depth-1 parent/child membership)
- Dangling edges left behind by the editor (resolved as orphans at run time)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from factory_flow.models import FlowEdge, FlowNode

logger = logging.getLogger(__name__)


class NoEntryPointError(Exception):
    """Raised when a flow has no pure source node to start from."""

    pass


@dataclass(frozen=True)
class Route:
    """An outgoing hop from a node.

    Attributes:
        edge_id: Edge the hop travels along
        target_id: Node the hop arrives at
        transit_time: Seconds spent in transit (<= 0 is instantaneous)
    """

    edge_id: str
    target_id: str
    transit_time: float


@dataclass
class ResolvedTopology:
    """Adjacency, membership and reachability computed for one run."""

    adjacency: Dict[str, List[Route]] = field(default_factory=dict)
    group_children: Dict[str, List[str]] = field(default_factory=dict)
    reachable: Set[str] = field(default_factory=set)
    start_node_ids: List[str] = field(default_factory=list)

    def routes_from(self, node_id: str) -> List[Route]:
        """Get outgoing routes of a node in fan-out order."""
        return self.adjacency.get(node_id, [])

    def children_of(self, group_id: str) -> List[str]:
        """Get the member node ids of a group."""
        return self.group_children.get(group_id, [])


def resolve_topology(
    nodes: Iterable[FlowNode], edges: Iterable[FlowEdge]
) -> ResolvedTopology:
    """Resolve a node/edge list into a runnable topology.

    Args:
        nodes: All nodes on the canvas, in display order
        edges: All edges on the canvas, in creation order

    Returns:
        ResolvedTopology for the flow

    Raises:
        NoEntryPointError: If no node has outgoing edges without also being
            the target of some edge
    """
    nodes = list(nodes)
    edges = list(edges)

    # 1. Adjacency grouped by source, edge order preserved
    adjacency: Dict[str, List[Route]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(
            Route(edge.id, edge.target, edge.transit_time)
        )

    # 2. Group membership from parent links, then declared children
    group_children: Dict[str, List[str]] = {}
    for node in nodes:
        if node.parent_id:
            group_children.setdefault(node.parent_id, []).append(node.id)
    for node in nodes:
        if node.is_group and node.child_ids:
            members = group_children.setdefault(node.id, [])
            members.extend(c for c in node.child_ids if c not in members)

    # 3. Pure sources
    all_targets = {edge.target for edge in edges}
    start_node_ids = [
        node.id
        for node in nodes
        if node.id not in all_targets and adjacency.get(node.id)
    ]
    if not start_node_ids:
        raise NoEntryPointError(
            "Could not identify the starting point of the process flow. "
            "Ensure nodes are connected."
        )

    # 4. Reachability (edges + group expansion). Children of a reached group
    # are reachable but only walked if reached by their own start or edge.
    reachable: Set[str] = set()
    visited: Set[str] = set()
    for start_id in start_node_ids:
        stack = [start_id]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)
            reachable.add(node_id)
            reachable.update(group_children.get(node_id, []))
            for route in reversed(adjacency.get(node_id, [])):
                stack.append(route.target_id)

    logger.debug(
        "Resolved topology: %d start node(s), %d reachable node(s)",
        len(start_node_ids),
        len(reachable),
    )
    return ResolvedTopology(
        adjacency=adjacency,
        group_children=group_children,
        reachable=reachable,
        start_node_ids=start_node_ids,
    )


class FlowGraph:
    """Owner of the editable node and edge lists for a flow.

    Provides:
    - Node and edge management in insertion order
    - Synchronous edge updates (transit time, label)
    - Upstream/downstream lookup
    - Resolution into a ResolvedTopology for a run
    """

    def __init__(
        self,
        nodes: Optional[Iterable[FlowNode]] = None,
        edges: Optional[Iterable[FlowEdge]] = None,
    ) -> None:
        """Initialize the graph, optionally from existing nodes and edges."""
        self._nodes: Dict[str, FlowNode] = {}
        self._edges: Dict[str, FlowEdge] = {}

        for node in nodes or []:
            self.add_node(node)
        for edge in edges or []:
            self.add_edge(edge)

    def add_node(self, node: FlowNode) -> None:
        """Add a node to the graph.

        Raises:
            ValueError: If a node with the same id already exists
        """
        if node.id in self._nodes:
            raise ValueError(f"Node already exists: {node.id}")
        self._nodes[node.id] = node

    def add_edge(self, edge: FlowEdge) -> None:
        """Add an edge to the graph.

        Endpoints are not required to exist; the editor may hold dangling
        edges while a node is being replaced.

        Raises:
            ValueError: If an edge with the same id already exists
        """
        if edge.id in self._edges:
            raise ValueError(f"Edge already exists: {edge.id}")
        self._edges[edge.id] = edge

    def remove_node(self, node_id: str) -> FlowNode:
        """Remove a node, leaving its edges in place.

        Raises:
            KeyError: If the node does not exist
        """
        if node_id not in self._nodes:
            raise KeyError(f"Node not found: {node_id}")
        return self._nodes.pop(node_id)

    def update_edge(self, edge_id: str, **patch: Any) -> FlowEdge:
        """Replace an edge with a patched copy.

        Args:
            edge_id: Id of the edge to update
            **patch: Field values to change (e.g. transit_time, label)

        Returns:
            The updated edge

        Raises:
            KeyError: If the edge does not exist
            ValueError: If the patch tries to change the edge id or names a
                field FlowEdge does not have
        """
        if edge_id not in self._edges:
            raise KeyError(f"Edge not found: {edge_id}")
        if "id" in patch and patch["id"] != edge_id:
            raise ValueError("Edge id cannot be changed")
        unknown = sorted(set(patch) - set(FlowEdge.model_fields))
        if unknown:
            raise ValueError(f"Unknown edge field(s): {', '.join(unknown)}")

        current = self._edges[edge_id]
        updated = FlowEdge.model_validate({**current.model_dump(), **patch})
        self._edges[edge_id] = updated
        return updated

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        """Get a node by id."""
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[FlowEdge]:
        """Get an edge by id."""
        return self._edges.get(edge_id)

    def get_nodes(self) -> List[FlowNode]:
        """Get all nodes in insertion order."""
        return list(self._nodes.values())

    def get_edges(self) -> List[FlowEdge]:
        """Get all edges in insertion order."""
        return list(self._edges.values())

    def get_downstream(self, node_id: str) -> List[FlowEdge]:
        """Get all outgoing edges from a node."""
        return [e for e in self._edges.values() if e.source == node_id]

    def get_upstream(self, node_id: str) -> List[FlowEdge]:
        """Get all incoming edges to a node."""
        return [e for e in self._edges.values() if e.target == node_id]

    def resolve(self) -> ResolvedTopology:
        """Resolve the current nodes and edges for a run."""
        return resolve_topology(self.get_nodes(), self.get_edges())

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"FlowGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"
