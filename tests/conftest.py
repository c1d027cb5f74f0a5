"""Shared test fixtures for factory-flow tests."""

from typing import List

import pytest

from factory_flow import (
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    PlayByPlaySimulation,
    RecordingSink,
    SimulationSettings,
)


@pytest.fixture
def chain_nodes() -> List[FlowNode]:
    """Three machines A -> B -> C with cycle times 10, 4, 4."""
    return [
        FlowNode(id="A", name="Mixer", cycle_time=10.0),
        FlowNode(id="B", name="Filler", cycle_time=4.0),
        FlowNode(id="C", name="Capper", cycle_time=4.0),
    ]


@pytest.fixture
def chain_edges() -> List[FlowEdge]:
    """One second of transit between each chained machine."""
    return [
        FlowEdge(id="A-B", source="A", target="B", transit_time=1.0),
        FlowEdge(id="B-C", source="B", target="C", transit_time=1.0),
    ]


@pytest.fixture
def chain_graph(chain_nodes: List[FlowNode], chain_edges: List[FlowEdge]) -> FlowGraph:
    """FlowGraph for the A -> B -> C chain."""
    return FlowGraph(chain_nodes, chain_edges)


@pytest.fixture
def group_graph() -> FlowGraph:
    """Source S feeding a group G of three machines, then a packer P."""
    return FlowGraph(
        [
            FlowNode(id="S", cycle_time=1.0),
            FlowNode(id="G", kind=NodeKind.GROUP),
            FlowNode(id="g1", cycle_time=2.0, parent_id="G"),
            FlowNode(id="g2", cycle_time=5.0, parent_id="G"),
            FlowNode(id="g3", cycle_time=8.0, parent_id="G"),
            FlowNode(id="P", cycle_time=1.0),
        ],
        [
            FlowEdge(id="S-G", source="S", target="G", transit_time=0.0),
            FlowEdge(id="G-P", source="G", target="P", transit_time=0.0),
        ],
    )


@pytest.fixture
def cycle_graph() -> FlowGraph:
    """Two machines feeding each other, with no pure source."""
    return FlowGraph(
        [FlowNode(id="X", cycle_time=1.0), FlowNode(id="Y", cycle_time=1.0)],
        [
            FlowEdge(id="X-Y", source="X", target="Y", transit_time=1.0),
            FlowEdge(id="Y-X", source="Y", target="X", transit_time=1.0),
        ],
    )


@pytest.fixture
def sink() -> RecordingSink:
    """Recording presentation sink."""
    return RecordingSink()


@pytest.fixture
def settings() -> SimulationSettings:
    """Default simulation settings."""
    return SimulationSettings()


@pytest.fixture
def chain_simulation(
    chain_graph: FlowGraph, sink: RecordingSink, settings: SimulationSettings
) -> PlayByPlaySimulation:
    """Play-by-play simulation of the chain, not yet started."""
    return PlayByPlaySimulation(chain_graph, sink=sink, settings=settings)
