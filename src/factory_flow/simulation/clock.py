"""Simulation clock driven by externally delivered frame deltas."""

from typing import Optional


class SimulationClock:
    """Converts wall-clock frame deltas into scaled simulation time.

    The first tick after ``start()`` only bootstraps ``last_timestamp`` and
    advances nothing, so a long gap between starting and the first frame
    never turns into a large spurious step.
    """

    def __init__(self, speed: float = 1.0):
        self.speed = 0.0
        self.set_speed(speed)
        self.running = False
        self.last_timestamp: Optional[float] = None  # Wall seconds since start
        self.elapsed = 0.0  # Simulated seconds since start

    def set_speed(self, speed: float) -> None:
        """Set the speed multiplier (0 freezes progress)."""
        if speed < 0:
            raise ValueError(f"speed must be >= 0, got {speed}")
        self.speed = speed

    def start(self) -> None:
        """Start (or restart) the clock from zero."""
        self.running = True
        self.last_timestamp = None
        self.elapsed = 0.0

    def stop(self) -> None:
        """Stop the clock. Safe to call repeatedly."""
        self.running = False

    def tick(self, delta_seconds: float) -> Optional[float]:
        """Consume one frame delta.

        Args:
            delta_seconds: Wall-clock seconds since the previous frame

        Returns:
            Simulated seconds to advance, or None if the frame is discarded
            (clock not running, or bootstrap frame)
        """
        if delta_seconds < 0:
            raise ValueError(f"delta_seconds must be >= 0, got {delta_seconds}")
        if not self.running:
            return None

        if self.last_timestamp is None:
            self.last_timestamp = 0.0
            return None

        self.last_timestamp += delta_seconds
        dt = delta_seconds * self.speed
        self.elapsed += dt
        return dt
