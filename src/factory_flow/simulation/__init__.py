"""Simulation module: clock, token engine and completion analysis."""

from factory_flow.simulation.analysis import (
    CompletionReport,
    NodeUtilization,
    UtilizationMode,
    analyze_completion,
)
from factory_flow.simulation.clock import SimulationClock
from factory_flow.simulation.engine import DEFAULT_GROUP_CYCLE_TIME, TokenEngine
from factory_flow.simulation.tokens import AtNode, InTransit, TokenState

# Note: PlayByPlaySimulation lives in factory_flow.run so that settings
# loading (factory_flow.config) can import from this package.

__all__ = [
    "AtNode",
    "InTransit",
    "TokenState",
    "SimulationClock",
    "TokenEngine",
    "DEFAULT_GROUP_CYCLE_TIME",
    "CompletionReport",
    "NodeUtilization",
    "UtilizationMode",
    "analyze_completion",
]
