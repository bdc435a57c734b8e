# terrainplanner/motion_model/data_models.py
"""
State and path types of the Dubins airplane motion model.
"""
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .constants import DubinsWord, TWO_PI
from .exceptions import InfeasiblePathError
from .utils.dubins import sample_word, wrap_pi

@dataclass(frozen=True)
class DubinsState:
    """
    Position of the airframe plus its heading (yaw, radians, CCW from +x).
    Yaw is stored wrapped to (-pi, pi], so headings a full turn apart compare equal.
    """
    x: float
    y: float
    z: float
    yaw: float

    def __post_init__(self):
        if not -math.pi < self.yaw <= math.pi:
            object.__setattr__(self, "yaw", wrap_pi(self.yaw))

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def as_config(self) -> Tuple[float, float, float]:
        """Planar configuration used by the 2D Dubins solver."""
        return (self.x, self.y, self.yaw)

    @classmethod
    def from_position_velocity(cls, position: Sequence[float], velocity: Sequence[float]) -> "DubinsState":
        """Builds a state whose heading follows the horizontal velocity."""
        yaw = math.atan2(velocity[1], velocity[0])
        return cls(float(position[0]), float(position[1]), float(position[2]), yaw)

@dataclass(frozen=True)
class DubinsAirplanePath:
    """
    A (non-optimal) Dubins airplane path: a planar Dubins word flown with a
    constant climb angle, optionally lengthened by helical loiter turns on the
    first arc so a steep altitude change fits the climb limit.
    """
    start: DubinsState
    goal: DubinsState
    word: DubinsWord
    params: Tuple[float, float, float]   # normalised by rho, without loiter turns
    rho: float
    loiter_turns: int
    horizontal_length: float             # including loiter turns
    delta_z: float                       # altitude change actually flown
    feasible: bool
    length: float

    @property
    def flown_params(self) -> Tuple[float, float, float]:
        return (self.params[0] + TWO_PI * self.loiter_turns, self.params[1], self.params[2])

    @property
    def climb_angle(self) -> float:
        if self.horizontal_length <= 0.0:
            return 0.0
        return math.atan2(self.delta_z, self.horizontal_length)

    @property
    def reaches_goal(self) -> bool:
        return self.feasible and math.isclose(self.start.z + self.delta_z, self.goal.z, abs_tol=1e-9)

    def interpolate(self, t: float) -> DubinsState:
        """
        State at fraction t of the path. A pure function of t, so the same path
        can be re-sampled at any resolution.
        """
        if not self.feasible:
            raise InfeasiblePathError(
                f"Cannot sample {self.word} path: climb of {self.goal.z - self.start.z:.1f}m exceeds the limit")
        t = min(1.0, max(0.0, t))
        if t == 0.0:
            return self.start
        if t == 1.0 and self.reaches_goal:
            return self.goal
        x, y, yaw = sample_word(self.start.as_config(), self.word, self.flown_params, self.rho,
                                t * self.horizontal_length)
        return DubinsState(x, y, self.start.z + t * self.delta_z, wrap_pi(yaw))

    @property
    def end_state(self) -> DubinsState:
        return self.interpolate(1.0)
