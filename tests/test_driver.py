"""Integration tests for the headless SimPy driver."""

import pandas as pd
import pytest

from factory_flow import (
    FlowEdge,
    FlowGraph,
    FlowNode,
    NoEntryPointError,
    NoticeKind,
    SimulationSettings,
    print_summary,
    run_headless,
)


@pytest.fixture
def fast_settings() -> SimulationSettings:
    """Quarter-second frames at 2x speed."""
    return SimulationSettings(speed=2.0, frame_interval_sec=0.25, max_sim_seconds=120.0)


class TestRunHeadless:
    """Tests for run_headless()."""

    def test_chain_runs_to_completion(self, chain_graph, fast_settings):
        result = run_headless(chain_graph, settings=fast_settings)

        assert result.completed
        assert result.report.bottleneck_id == "A"
        assert result.report.utilization == {"A": 100, "B": 40, "C": 40}
        assert result.sim_seconds >= 20.0
        # Simulated time runs at 2x driver time, plus the bootstrap frame
        assert result.wall_seconds == pytest.approx(result.sim_seconds / 2.0 + 0.25)
        assert result.sink.notice_kinds() == [NoticeKind.COMPLETED]

    def test_frames_dataframe(self, chain_graph, fast_settings):
        result = run_headless(chain_graph, settings=fast_settings)
        df = result.frames_df

        assert isinstance(df, pd.DataFrame)
        assert {"tick", "sim_time", "node_id", "active", "progress"} <= set(df.columns)
        assert set(df["node_id"]) == {"A", "B", "C"}
        assert len(df) == 3 * len(result.sink.frames)
        assert df.groupby("node_id")["active"].any().all()

    def test_edges_dataframe(self, chain_graph, fast_settings):
        result = run_headless(chain_graph, settings=fast_settings)
        df = result.edges_df

        assert set(df["edge_id"]) == {"A-B", "B-C"}
        in_transit = df[df["transit_in_progress"]]
        assert not in_transit.empty
        assert (in_transit["transit_progress"] < 1.0).all()

    def test_reachable_cycle_hits_cap(self, fast_settings):
        graph = FlowGraph(
            [
                FlowNode(id="S", cycle_time=1.0),
                FlowNode(id="A", cycle_time=1.0),
                FlowNode(id="B", cycle_time=1.0),
            ],
            [
                FlowEdge(id="S-A", source="S", target="A", transit_time=1.0),
                FlowEdge(id="A-B", source="A", target="B", transit_time=1.0),
                FlowEdge(id="B-A", source="B", target="A", transit_time=1.0),
            ],
        )
        settings = SimulationSettings(
            speed=4.0, frame_interval_sec=0.25, max_sim_seconds=5.0
        )
        result = run_headless(graph, settings=settings)

        assert not result.completed
        assert result.report is None
        assert result.wall_seconds == pytest.approx(5.0)
        assert result.sink.reset_count == 1
        assert result.sink.notice_kinds() == [NoticeKind.STOPPED]

    def test_no_entry_point(self, cycle_graph):
        with pytest.raises(NoEntryPointError):
            run_headless(cycle_graph)

    def test_print_summary(self, chain_graph, fast_settings, capsys):
        result = run_headless(chain_graph, settings=fast_settings)
        print_summary(result)
        out = capsys.readouterr().out
        assert "SIMULATION COMPLETE" in out
        assert "Bottleneck:        A" in out
