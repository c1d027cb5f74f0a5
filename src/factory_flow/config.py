"""YAML configuration loader for simulation settings."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from factory_flow.simulation.analysis import UtilizationMode
from factory_flow.simulation.engine import DEFAULT_GROUP_CYCLE_TIME


@dataclass
class SimulationSettings:
    """Settings for a play-by-play run, loaded from config/defaults.yaml."""

    speed: float = 1.0  # Simulated seconds per wall-clock second
    utilization_mode: UtilizationMode = UtilizationMode.TWO_PASS
    default_group_cycle_time: float = DEFAULT_GROUP_CYCLE_TIME
    frame_interval_sec: float = 1.0 / 60.0  # Headless driver frame delta
    max_sim_seconds: float = 3600.0  # Headless driver wall-time cap

    def __post_init__(self) -> None:
        """Validate settings."""
        self.utilization_mode = UtilizationMode(self.utilization_mode)
        if self.speed < 0:
            raise ValueError(f"speed must be >= 0, got {self.speed}")
        if self.default_group_cycle_time <= 0:
            raise ValueError(
                "default_group_cycle_time must be > 0, "
                f"got {self.default_group_cycle_time}"
            )
        if self.frame_interval_sec <= 0:
            raise ValueError(
                f"frame_interval_sec must be > 0, got {self.frame_interval_sec}"
            )
        if self.max_sim_seconds <= 0:
            raise ValueError(
                f"max_sim_seconds must be > 0, got {self.max_sim_seconds}"
            )


class ConfigLoader:
    """Loads simulation settings from YAML configuration files."""

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)

    def load_defaults(self) -> SimulationSettings:
        """Load settings from config/defaults.yaml (defaults if missing)."""
        path = self.config_dir / "defaults.yaml"
        if not path.exists():
            return SimulationSettings()
        return self.load_settings(path)

    def load_settings(self, path: Path | str) -> SimulationSettings:
        """Load settings from an explicit YAML file."""
        data = self._load_yaml(Path(path))
        sim = data.get("simulation") or {}
        defaults = SimulationSettings()
        return SimulationSettings(
            speed=sim.get("speed", defaults.speed),
            utilization_mode=sim.get("utilization_mode", defaults.utilization_mode),
            default_group_cycle_time=sim.get(
                "default_group_cycle_time", defaults.default_group_cycle_time
            ),
            frame_interval_sec=sim.get(
                "frame_interval_sec", defaults.frame_interval_sec
            ),
            max_sim_seconds=sim.get("max_sim_seconds", defaults.max_sim_seconds),
        )

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return yaml.safe_load(f) or {}
