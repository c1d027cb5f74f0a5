"""Headless SimPy driver for play-by-play runs.

Stands in for the editor's rendering loop: a SimPy process delivers a frame
every ``frame_interval_sec`` of environment time and feeds that delta to the
simulation's ``tick()``, until the run completes or ``max_sim_seconds`` of
wall time have been driven.
"""

from dataclasses import dataclass
from typing import Generator, Optional

import pandas as pd
import simpy

from factory_flow.config import SimulationSettings
from factory_flow.presentation import RecordingSink
from factory_flow.run import PlayByPlaySimulation
from factory_flow.simulation import CompletionReport
from factory_flow.topology import FlowGraph


@dataclass
class HeadlessResult:
    """Outcome of a headless run."""

    completed: bool
    report: Optional[CompletionReport]
    sink: RecordingSink
    wall_seconds: float  # Driver (environment) time consumed
    sim_seconds: float  # Simulated time, after speed scaling

    @property
    def frames_df(self) -> pd.DataFrame:
        """Per-tick node activity."""
        return self.sink.frames_dataframe()

    @property
    def edges_df(self) -> pd.DataFrame:
        """Per-tick edge transit activity."""
        return self.sink.edges_dataframe()


def _frame_process(
    env: simpy.Environment,
    simulation: PlayByPlaySimulation,
    interval: float,
    limit: float,
) -> Generator:
    """Deliver one frame per interval while the run is active."""
    while simulation.is_running and env.now < limit:
        simulation.tick(interval)
        yield env.timeout(interval)


def run_headless(
    graph: FlowGraph,
    settings: Optional[SimulationSettings] = None,
    sink: Optional[RecordingSink] = None,
) -> HeadlessResult:
    """Run a play-by-play simulation to completion without a UI.

    Args:
        graph: Flow graph to simulate
        settings: Simulation settings (defaults if None)
        sink: Recording sink to collect output (a new one if None)

    Returns:
        HeadlessResult; ``completed`` is False if the wall-time cap was hit

    Raises:
        NoEntryPointError: If the flow has no start node
    """
    settings = settings or SimulationSettings()
    sink = sink or RecordingSink()
    simulation = PlayByPlaySimulation(graph, sink=sink, settings=settings)
    simulation.start()

    env = simpy.Environment()
    env.process(
        _frame_process(
            env,
            simulation,
            settings.frame_interval_sec,
            settings.max_sim_seconds,
        )
    )
    env.run()

    completed = simulation.report is not None
    sim_seconds = simulation.elapsed
    if not completed:
        print(
            f"Simulation did not complete within {settings.max_sim_seconds}s; stopping."
        )
        simulation.stop()

    return HeadlessResult(
        completed=completed,
        report=simulation.report,
        sink=sink,
        wall_seconds=env.now,
        sim_seconds=sim_seconds,
    )


def print_summary(result: HeadlessResult) -> None:
    """Print a short summary of a headless run."""
    print("\n--- SIMULATION COMPLETE ---" if result.completed else "\n--- SIMULATION STOPPED ---")
    print(f"Frames:            {len(result.sink.frames)}")
    print(f"Driver Time:       {result.wall_seconds:.2f}s")
    print(f"Simulated Time:    {result.sim_seconds:.2f}s")

    if result.report is None:
        return

    print(f"Bottleneck:        {result.report.bottleneck_id}")
    print("\n--- UTILIZATION (%) ---")
    df = result.report.to_dataframe()
    reachable = df[df["reachable"]]
    if not reachable.empty:
        print(reachable.set_index("node_id")[["effective_cycle_time", "utilization"]])
