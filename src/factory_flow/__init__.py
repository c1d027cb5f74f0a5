"""Play-by-play flow simulation for factory flow graphs."""

from factory_flow.config import ConfigLoader, SimulationSettings
from factory_flow.driver import HeadlessResult, print_summary, run_headless
from factory_flow.models import FlowEdge, FlowNode, NodeKind
from factory_flow.presentation import (
    EdgeSnapshot,
    NodeSnapshot,
    Notice,
    NoticeKind,
    NullSink,
    PresentationSink,
    RecordingSink,
    TickFrame,
    UnitPosition,
)
from factory_flow.run import PlayByPlaySimulation, analyze_instant
from factory_flow.simulation import (
    AtNode,
    CompletionReport,
    InTransit,
    NodeUtilization,
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
    Route,
    resolve_topology,
)

__all__ = [
    # Models
    "NodeKind",
    "FlowNode",
    "FlowEdge",
    # Config
    "ConfigLoader",
    "SimulationSettings",
    # Topology
    "FlowGraph",
    "ResolvedTopology",
    "Route",
    "NoEntryPointError",
    "resolve_topology",
    # Simulation
    "AtNode",
    "InTransit",
    "TokenState",
    "SimulationClock",
    "TokenEngine",
    "CompletionReport",
    "NodeUtilization",
    "UtilizationMode",
    "analyze_completion",
    # Presentation
    "PresentationSink",
    "NullSink",
    "RecordingSink",
    "TickFrame",
    "NodeSnapshot",
    "EdgeSnapshot",
    "UnitPosition",
    "Notice",
    "NoticeKind",
    # Entry points
    "PlayByPlaySimulation",
    "analyze_instant",
    "run_headless",
    "print_summary",
    "HeadlessResult",
]
