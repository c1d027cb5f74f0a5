"""Presentation boundary: snapshots, notices and sinks.

The simulation never renders anything itself. After every tick it hands a
TickFrame to a PresentationSink, which is free to draw the canvas, update
a minimap, or simply record the frames for later analysis.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

import pandas as pd

if TYPE_CHECKING:
    from factory_flow.simulation.analysis import CompletionReport


@dataclass(frozen=True)
class NodeSnapshot:
    """Presentation state of one node."""

    id: str
    active: bool = False
    progress: Optional[float] = None
    utilization: Optional[int] = None
    bottleneck: Optional[bool] = None


@dataclass(frozen=True)
class EdgeSnapshot:
    """Presentation state of one edge."""

    id: str
    transit_in_progress: bool = False
    transit_progress: float = 0.0


@dataclass(frozen=True)
class UnitPosition:
    """Where the primary unit currently is."""

    node_id: str
    progress: float


@dataclass
class TickFrame:
    """Everything the presentation layer needs after one tick."""

    tick: int
    sim_time: float
    nodes: List[NodeSnapshot] = field(default_factory=list)
    edges: List[EdgeSnapshot] = field(default_factory=list)
    unit_position: Optional[UnitPosition] = None

    def node(self, node_id: str) -> Optional[NodeSnapshot]:
        """Get the snapshot of a node by id."""
        return next((n for n in self.nodes if n.id == node_id), None)

    def edge(self, edge_id: str) -> Optional[EdgeSnapshot]:
        """Get the snapshot of an edge by id."""
        return next((e for e in self.edges if e.id == edge_id), None)

    @property
    def active_node_ids(self) -> List[str]:
        """Ids of nodes marked active in this frame."""
        return [n.id for n in self.nodes if n.active]


class NoticeKind(str, Enum):
    """User-facing notification types."""

    NO_ENTRY_POINT = "no_entry_point"
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Notice:
    """A user-facing notification (toast)."""

    kind: NoticeKind
    title: str
    message: str
    bottleneck_id: Optional[str] = None


class PresentationSink(ABC):
    """Consumer of simulation output.

    Implementations are called synchronously from the simulation's thread of
    control and must not call back into the simulation.
    """

    @abstractmethod
    def render_frame(self, frame: TickFrame) -> None:
        """Show node and edge activity after a tick."""
        pass

    @abstractmethod
    def update_unit_position(self, position: Optional[UnitPosition]) -> None:
        """Show (or clear, when None) the primary unit's position."""
        pass

    @abstractmethod
    def show_completion(self, report: "CompletionReport") -> None:
        """Show final utilization and bottleneck markers."""
        pass

    @abstractmethod
    def reset(self, node_ids: List[str], edge_ids: List[str]) -> None:
        """Return every node and edge to inactive, zero-progress state."""
        pass

    @abstractmethod
    def notify(self, notice: Notice) -> None:
        """Show a user-facing notification."""
        pass


class NullSink(PresentationSink):
    """Sink that discards everything."""

    def render_frame(self, frame: TickFrame) -> None:
        pass

    def update_unit_position(self, position: Optional[UnitPosition]) -> None:
        pass

    def show_completion(self, report: "CompletionReport") -> None:
        pass

    def reset(self, node_ids: List[str], edge_ids: List[str]) -> None:
        pass

    def notify(self, notice: Notice) -> None:
        pass


class RecordingSink(PresentationSink):
    """Sink that keeps everything it receives, for headless runs and tests."""

    def __init__(self):
        self.frames: List[TickFrame] = []
        self.positions: List[Optional[UnitPosition]] = []
        self.notices: List[Notice] = []
        self.completion: Optional["CompletionReport"] = None
        self.nodes: List[NodeSnapshot] = []
        self.edges: List[EdgeSnapshot] = []
        self.reset_count = 0

    def render_frame(self, frame: TickFrame) -> None:
        self.frames.append(frame)
        self.nodes = list(frame.nodes)
        self.edges = list(frame.edges)

    def update_unit_position(self, position: Optional[UnitPosition]) -> None:
        self.positions.append(position)

    def show_completion(self, report: "CompletionReport") -> None:
        self.completion = report
        self.nodes = list(report.node_snapshots())

    def reset(self, node_ids: List[str], edge_ids: List[str]) -> None:
        self.reset_count += 1
        self.nodes = [NodeSnapshot(id=node_id) for node_id in node_ids]
        self.edges = [EdgeSnapshot(id=edge_id) for edge_id in edge_ids]

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def current_position(self) -> Optional[UnitPosition]:
        """Most recent primary unit position."""
        return self.positions[-1] if self.positions else None

    def notice_kinds(self) -> List[NoticeKind]:
        """Kinds of all notices received, in order."""
        return [n.kind for n in self.notices]

    def frames_dataframe(self) -> pd.DataFrame:
        """Compile recorded node activity into a long-form DataFrame."""
        return _frames_to_dataframe(
            self.frames,
            lambda frame: (
                {
                    "node_id": n.id,
                    "active": n.active,
                    "progress": n.progress,
                }
                for n in frame.nodes
            ),
        )

    def edges_dataframe(self) -> pd.DataFrame:
        """Compile recorded edge transit activity into a long-form DataFrame."""
        return _frames_to_dataframe(
            self.frames,
            lambda frame: (
                {
                    "edge_id": e.id,
                    "transit_in_progress": e.transit_in_progress,
                    "transit_progress": e.transit_progress,
                }
                for e in frame.edges
            ),
        )


def _frames_to_dataframe(frames: Iterable[TickFrame], rows_of) -> pd.DataFrame:
    records = []
    for frame in frames:
        for row in rows_of(frame):
            records.append({"tick": frame.tick, "sim_time": frame.sim_time, **row})
    return pd.DataFrame(records)
