"""Topology module for graph-based factory flows."""

from factory_flow.topology.graph import (
    FlowGraph,
    NoEntryPointError,
    ResolvedTopology,
    Route,
    resolve_topology,
)

__all__ = [
    "FlowGraph",
    "NoEntryPointError",
    "ResolvedTopology",
    "Route",
    "resolve_topology",
]
