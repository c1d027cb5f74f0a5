"""Completion analysis: per-node utilization and bottleneck detection.

Utilization is each reachable node's effective cycle time relative to the
slowest node seen, expressed as a whole percentage capped at 100. The
slowest reachable node is the bottleneck.

Two modes are supported:
- TWO_PASS: find the true maximum first, then score every node against it.
- RUNNING_MAX: score each node against the maximum seen so far, in node
  order. Nodes listed before the eventual bottleneck can be scored against
  a smaller maximum and so report higher utilization than TWO_PASS.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

import pandas as pd

from factory_flow.models import FlowNode
from factory_flow.presentation import NodeSnapshot
from factory_flow.topology import ResolvedTopology

logger = logging.getLogger(__name__)


class UtilizationMode(str, Enum):
    """How utilization is normalised against the slowest node."""

    TWO_PASS = "two_pass"
    RUNNING_MAX = "running_max"


@dataclass
class NodeUtilization:
    """Completion result for a single node."""

    node_id: str
    reachable: bool
    effective_cycle_time: float = 0.0
    utilization: int = 0
    bottleneck: bool = False


@dataclass
class CompletionReport:
    """Utilization and bottleneck for one finished run."""

    bottleneck_id: Optional[str]
    max_cycle_time: float
    mode: UtilizationMode
    nodes: List[NodeUtilization] = field(default_factory=list)

    @property
    def utilization(self) -> Dict[str, int]:
        """Utilization percentage keyed by node id."""
        return {n.node_id: n.utilization for n in self.nodes}

    def get(self, node_id: str) -> Optional[NodeUtilization]:
        """Get the result for a node by id."""
        return next((n for n in self.nodes if n.node_id == node_id), None)

    def node_snapshots(self) -> List[NodeSnapshot]:
        """Final, inactive presentation state for every node."""
        return [
            NodeSnapshot(
                id=n.node_id,
                active=False,
                utilization=n.utilization,
                bottleneck=n.bottleneck,
            )
            for n in self.nodes
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Per-node results as a DataFrame, one row per node."""
        return pd.DataFrame(
            [
                {
                    "node_id": n.node_id,
                    "reachable": n.reachable,
                    "effective_cycle_time": n.effective_cycle_time,
                    "utilization": n.utilization,
                    "bottleneck": n.bottleneck,
                }
                for n in self.nodes
            ],
            columns=[
                "node_id",
                "reachable",
                "effective_cycle_time",
                "utilization",
                "bottleneck",
            ],
        )


def _percent(cycle_time: float, max_cycle_time: float) -> int:
    if max_cycle_time <= 0:
        return 0
    # Half-up rounding, not Python's round-half-even
    return min(100, math.floor(100 * cycle_time / max_cycle_time + 0.5))


def analyze_completion(
    nodes: Iterable[FlowNode],
    topology: ResolvedTopology,
    mode: UtilizationMode = UtilizationMode.TWO_PASS,
) -> CompletionReport:
    """Compute utilization and the bottleneck for a finished run.

    Args:
        nodes: All nodes of the run, in display order
        topology: Resolved topology of the run
        mode: Utilization normalisation mode

    Returns:
        CompletionReport covering every node
    """
    nodes = list(nodes)
    reachable = [n for n in nodes if n.id in topology.reachable]

    bottleneck_id = topology.start_node_ids[0] if topology.start_node_ids else None
    max_cycle_time = 0.0
    running: Dict[str, float] = {}
    for node in reachable:
        cycle_time = node.effective_cycle_time
        if cycle_time > max_cycle_time:
            max_cycle_time = cycle_time
            bottleneck_id = node.id
        running[node.id] = max_cycle_time

    results: List[NodeUtilization] = []
    for node in nodes:
        if node.id not in topology.reachable:
            results.append(NodeUtilization(node_id=node.id, reachable=False))
            continue

        cycle_time = node.effective_cycle_time
        if mode == UtilizationMode.RUNNING_MAX:
            reference = running[node.id]
        else:
            reference = max_cycle_time
        results.append(
            NodeUtilization(
                node_id=node.id,
                reachable=True,
                effective_cycle_time=cycle_time,
                utilization=_percent(cycle_time, reference),
                bottleneck=node.id == bottleneck_id,
            )
        )

    logger.info(
        "Completion analysis: bottleneck=%s (%.3fs effective cycle)",
        bottleneck_id,
        max_cycle_time,
    )
    return CompletionReport(
        bottleneck_id=bottleneck_id,
        max_cycle_time=max_cycle_time,
        mode=mode,
        nodes=results,
    )
