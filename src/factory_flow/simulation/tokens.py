"""Flow token states.

A token is either being processed at a node or travelling along an edge.
Token records are immutable; advancing a token builds a new record.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class AtNode:
    """A unit being processed at a node."""

    node_id: str
    progress: float = 0.0  # Fraction of one cycle, [0, 1)


@dataclass(frozen=True)
class InTransit:
    """A unit travelling along an edge."""

    from_node_id: str
    to_node_id: str
    edge_id: str
    transit_time: float
    transit_progress: float = 0.0  # Fraction of the edge covered, [0, 1)


TokenState = Union[AtNode, InTransit]
