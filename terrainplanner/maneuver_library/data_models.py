# terrainplanner/maneuver_library/data_models.py
"""
Trajectory containers produced by the maneuver library.

States are immutable. A Trajectory carries the validity and utility assigned
by the library that generated it; a TrajectorySegments assembly only ever
holds valid trajectories.
"""
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .constants import ManeuverConstants
from .exceptions import InvalidSegmentError

Vector3 = Tuple[float, float, float]

@dataclass(frozen=True)
class State:
    """Sampled vehicle state. Attitude is a unit quaternion (w, x, y, z)."""
    position: Vector3
    velocity: Vector3
    attitude: Tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)

def _stack(vectors, width: int = 3) -> np.ndarray:
    if not vectors:
        return np.empty((0, width))
    return np.array(vectors, dtype=float)

@dataclass
class Trajectory:
    """States sampled every dt seconds, with the utility and validity assigned to them."""
    states: List[State] = field(default_factory=list)
    utility: float = 0.0
    validity: bool = False
    dt: float = ManeuverConstants.DEFAULT_DT_S

    def __len__(self):
        return len(self.states)

    def position(self) -> np.ndarray:
        return _stack([s.position for s in self.states])

    def velocity(self) -> np.ndarray:
        return _stack([s.velocity for s in self.states])

    def valid(self) -> bool:
        return self.validity

    @property
    def duration(self) -> float:
        return self.dt * max(len(self.states) - 1, 0)

    @property
    def end_state(self) -> State:
        return self.states[-1]

    def extended(self, other: "Trajectory") -> "Trajectory":
        """
        A new trajectory flying self then other. The first state of other is
        dropped as it repeats the last state of self.
        """
        return Trajectory(states=self.states + other.states[1:], dt=self.dt)

@dataclass
class TrajectorySegments:
    """
    Ordered assembly of trajectory segments. Aggregate utility and validity
    are owned by the caller and refreshed with update_validity().
    """
    segments: List[Trajectory] = field(default_factory=list)
    utility: float = 0.0
    validity: bool = False

    def __len__(self):
        return len(self.segments)

    def append_segment(self, trajectory: Trajectory) -> None:
        if not trajectory.validity:
            raise InvalidSegmentError("Cannot append a trajectory that has not passed validation")
        self.segments.append(trajectory)

    def reset_segments(self) -> None:
        self.segments.clear()

    def trim_segments(self, max_segments: int) -> None:
        """Drops the oldest segments so at most max_segments remain."""
        excess = len(self.segments) - max_segments
        if excess > 0:
            del self.segments[:excess]

    def last_segment(self) -> Trajectory:
        if not self.segments:
            raise IndexError("last_segment() called on an empty TrajectorySegments")
        return self.segments[-1]

    def position(self) -> np.ndarray:
        if not self.segments:
            return np.empty((0, 3))
        return np.vstack([segment.position() for segment in self.segments])

    def velocity(self) -> np.ndarray:
        if not self.segments:
            return np.empty((0, 3))
        return np.vstack([segment.velocity() for segment in self.segments])

    def valid(self) -> bool:
        return self.validity

    def update_validity(self) -> None:
        self.validity = bool(self.segments) and all(segment.validity for segment in self.segments)
        self.utility = sum(segment.utility for segment in self.segments)
