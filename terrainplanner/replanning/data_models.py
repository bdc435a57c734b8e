# terrainplanner/replanning/data_models.py
"""
Records exchanged between the replanning driver and its consumers.
"""
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..maneuver_library import State, Trajectory

@dataclass(frozen=True)
class VehicleStateEstimate:
    """Latest pose and twist, copied out atomically by the planning cycle."""
    position: Tuple[float, float, float]
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    attitude: Tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)
    timestamp: float = 0.0

@dataclass(frozen=True)
class ReferenceTrajectory:
    """The selected primitive and the time it was planned at."""
    trajectory: Trajectory
    plan_time: float

    def setpoint_at(self, now: float) -> Optional[State]:
        """
        Sample at floor((now - plan_time) / dt), clamped to the first and last
        state. None for an empty trajectory.
        """
        states = self.trajectory.states
        if not states:
            return None
        index = int(math.floor((now - self.plan_time) / self.trajectory.dt))
        return states[min(max(index, 0), len(states) - 1)]

    @property
    def end_time(self) -> float:
        return self.plan_time + self.trajectory.duration

@dataclass
class CycleReport:
    """Outcome of one planning cycle."""
    timestamp: float
    degraded: bool
    num_candidates: int = 0
    num_valid: int = 0
    anchor: Optional[Tuple[float, float, float]] = None
    selected: Optional[Trajectory] = field(default=None, repr=False)
    duration: float = 0.0
    reason: str = ""
