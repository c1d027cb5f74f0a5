"""Pydantic schemas for flow graph inputs."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    """Kinds of node that can be placed on the flow canvas."""

    EQUIPMENT = "equipment"
    GROUP = "group"


class FlowNode(BaseModel):
    """A piece of equipment or a sub-flow group on the canvas."""

    id: str = Field(min_length=1)
    kind: NodeKind = NodeKind.EQUIPMENT
    name: str = ""
    cycle_time: float = Field(default=0.0, ge=0.0)  # Seconds per unit
    max_capacity: int = Field(default=1, ge=0)  # Parallel processing slots
    parent_id: Optional[str] = None  # Owning group, if any
    child_ids: List[str] = Field(default_factory=list)  # Groups only

    @property
    def is_group(self) -> bool:
        """Check if this node is a sub-flow group."""
        return self.kind == NodeKind.GROUP

    @property
    def effective_cycle_time(self) -> float:
        """Seconds per unit once parallel capacity is taken into account."""
        return self.cycle_time / max(self.max_capacity, 1)


class FlowEdge(BaseModel):
    """A directed, timed connection between two nodes."""

    id: str = Field(min_length=1)
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    transit_time: float = 0.0  # Seconds; <= 0 means instantaneous
    label: Optional[str] = None
