# terrainplanner/motion_model/core.py
"""
Dubins airplane state space.

States are (x, y, z, yaw). The airframe flies at constant speed with a
bounded roll angle, which yields a minimum turning radius rho, and a bounded
climb angle gamma_max, which yields a maximum climb/sink rate of
V * tan(gamma_max). Paths are planar Dubins curves flown at a constant climb
angle. Steep altitude changes are resolved according to a ClimbPolicy.

NOTE: the distance is asymmetric. Swapping start and goal generally changes
the Dubins word and therefore the length.
"""
import math
from typing import List

import numpy as np

from .constants import ClimbPolicy, MotionModelConstants, TWO_PI
from .data_models import DubinsAirplanePath, DubinsState
from .exceptions import InvalidModelParameterError
from .utils.dubins import shortest_word

class DubinsAirplaneStateSpace:
    """Kinematic feasibility geometry of a fixed-wing airframe."""

    def __init__(self, turning_radius: float = MotionModelConstants.DEFAULT_TURNING_RADIUS_M,
                 max_climb_angle: float = MotionModelConstants.DEFAULT_MAX_CLIMB_ANGLE_RAD,
                 climb_policy: ClimbPolicy = ClimbPolicy.SPIRAL):
        if not turning_radius > 0.0:
            raise InvalidModelParameterError("turning_radius", turning_radius)
        if not 0.0 < max_climb_angle < 0.5 * math.pi:
            raise InvalidModelParameterError("max_climb_angle", max_climb_angle)

        self._rho = float(turning_radius)
        self._gamma_max = float(max_climb_angle)
        self._tan_gamma_max = math.tan(self._gamma_max)
        self.climb_policy = ClimbPolicy(climb_policy)

    @property
    def min_turning_radius(self) -> float:
        return self._rho

    @property
    def max_climb_angle(self) -> float:
        return self._gamma_max

    def max_climb_rate(self, speed: float) -> float:
        """Maximum climb or sink rate in m/s at the given airspeed."""
        return abs(speed) * self._tan_gamma_max

    def steer(self, start: DubinsState, goal: DubinsState) -> DubinsAirplanePath:
        """Computes the Dubins airplane path from start to goal."""
        word, params = shortest_word(start.as_config(), goal.as_config(), self._rho)
        horizontal = sum(params) * self._rho
        requested_dz = goal.z - start.z
        max_dz = horizontal * self._tan_gamma_max

        turns, delta_z, feasible = 0, requested_dz, True
        if abs(requested_dz) > max_dz + 1e-9:
            if self.climb_policy == ClimbPolicy.SPIRAL:
                required = abs(requested_dz) / self._tan_gamma_max
                turns = max(1, math.ceil((required - horizontal) / (TWO_PI * self._rho)))
                horizontal += TWO_PI * self._rho * turns
            elif self.climb_policy == ClimbPolicy.CLAMP:
                delta_z = math.copysign(max_dz, requested_dz)
            else:
                feasible = False

        length = math.hypot(horizontal, delta_z) if feasible else math.inf
        return DubinsAirplanePath(start=start, goal=goal, word=word, params=params, rho=self._rho,
                                  loiter_turns=turns, horizontal_length=horizontal, delta_z=delta_z,
                                  feasible=feasible, length=length)

    def distance(self, start: DubinsState, goal: DubinsState) -> float:
        """
        Length of the Dubins airplane path from start to goal.

        Zero only for identical states. Under CLAMP the reported distance is the
        straight-line bound hypot(horizontal, requested climb) so it never
        undercuts the altitude change that was left unflown.
        """
        path = self.steer(start, goal)
        if path.feasible and not path.reaches_goal:
            return math.hypot(path.horizontal_length, goal.z - start.z)
        return path.length

    def interpolate(self, start: DubinsState, goal: DubinsState, t: float) -> DubinsState:
        return self.steer(start, goal).interpolate(t)

    @staticmethod
    def sample_fractions(length: float, resolution: float) -> np.ndarray:
        """Evenly spaced fractions covering a path of the given length, both ends included."""
        if not math.isfinite(length) or length <= 0.0:
            return np.array([0.0, 1.0])
        resolution = resolution if resolution > 0.0 else MotionModelConstants.DEFAULT_SAMPLING_RESOLUTION_M
        count = max(1, math.ceil(length / resolution))
        return np.linspace(0.0, 1.0, count + 1)

    def sample_path(self, path: DubinsAirplanePath, resolution: float) -> List[DubinsState]:
        """Samples a feasible path at the given spatial resolution."""
        return [path.interpolate(float(t)) for t in self.sample_fractions(path.length, resolution)]
