# terrainplanner/maneuver_library/core.py
"""
Receding-horizon maneuver library.

Each cycle generates a fixed family of motion primitives from an anchor
state, validates every candidate against the terrain, scores the valid ones
and selects one to fly. Turns never exceed the minimum turning radius of the
airframe and climbs never exceed its maximum climb angle.
"""
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from ..config import PlannerConfig
from ..exceptions import ConfigurationError
from ..terrain import TerrainMap, TerrainValidityChecker
from .constants import ManeuverConstants
from .data_models import State, Trajectory
from .exceptions import ManeuverLibraryError
from .utils.kinematics import coordinated_turn_attitude
from .utils.scoring import (
    SelectionStrategy, UtilityFunction, goal_progress_utility, select_trajectory, zero_utility
)

logger = logging.getLogger(__name__)

class ManeuverLibrary:
    """Generates, validates, scores and selects motion primitives."""

    def __init__(self, terrain_map: Optional[TerrainMap] = None, config: Optional[PlannerConfig] = None):
        self.config = config or PlannerConfig()
        self.planning_horizon = self.config.planning_horizon
        self.dt = self.config.primitive_dt
        self.selection_strategy = SelectionStrategy(self.config.selection_strategy)
        self.utility_function: UtilityFunction = zero_utility
        self.goal: Optional[np.ndarray] = None
        self.rng = np.random.default_rng(self.config.random_seed)

        self.terrain_map: Optional[TerrainMap] = None
        self.checker: Optional[TerrainValidityChecker] = None
        self.motion_primitives: List[Trajectory] = []
        if terrain_map is not None:
            self.set_terrain_map(terrain_map)

    # --- Configuration ---

    def set_terrain_map(self, terrain_map: TerrainMap) -> None:
        self.terrain_map = terrain_map
        self.checker = TerrainValidityChecker.from_config(terrain_map, self.config)

    def get_terrain_map(self) -> Optional[TerrainMap]:
        return self.terrain_map

    def set_planning_horizon(self, horizon: float) -> None:
        if not horizon > 0.0:
            raise ConfigurationError("planning_horizon", horizon, "Value must be positive")
        self.planning_horizon = horizon

    def set_goal(self, goal: Sequence[float]) -> None:
        """Scores candidates by progress towards goal."""
        self.goal = np.asarray(goal, dtype=float)
        self.utility_function = goal_progress_utility(self.goal)

    def set_utility_function(self, utility_function: UtilityFunction) -> None:
        self.utility_function = utility_function

    def set_selection_strategy(self, strategy) -> None:
        self.selection_strategy = SelectionStrategy(strategy)

    # --- Generation ---

    def _speed_and_heading(self, velocity: np.ndarray):
        speed = math.hypot(velocity[0], velocity[1])
        heading = math.atan2(velocity[1], velocity[0]) if speed > 0.0 else 0.0
        if speed < self.config.min_speed:
            speed = self.config.cruise_speed
        return speed, heading

    def _integrate(self, position: np.ndarray, heading: float, speed: float, yaw_rate: float,
                   climb_rate: float) -> Trajectory:
        """Forward Euler integration of a constant turn and climb rate over the planning horizon."""
        steps = max(1, int(round(self.planning_horizon / self.dt)))
        x, y, z = (float(v) for v in position)
        states = []
        for _ in range(steps + 1):
            velocity = (speed * math.cos(heading), speed * math.sin(heading), climb_rate)
            attitude = coordinated_turn_attitude(speed, yaw_rate, climb_rate, heading)
            states.append(State(position=(x, y, z), velocity=velocity, attitude=attitude))
            x += velocity[0] * self.dt
            y += velocity[1] * self.dt
            z += velocity[2] * self.dt
            heading += yaw_rate * self.dt
        return Trajectory(states=states, dt=self.dt)

    def _primitive_family(self, position: np.ndarray, velocity: np.ndarray) -> List[Trajectory]:
        speed, heading = self._speed_and_heading(velocity)
        radius = self.config.turning_radius
        max_climb_rate = speed * math.tan(self.config.max_climb_angle) * self.config.climb_fraction

        family = []
        for yaw_factor in ManeuverConstants.YAW_RATE_FACTORS:
            for climb_factor in ManeuverConstants.CLIMB_RATE_FACTORS:
                family.append(self._integrate(position, heading, speed, yaw_factor * speed / radius,
                                              climb_factor * max_climb_rate))
        return family

    def generate_motion_primitives(self, start_position: Sequence[float],
                                   start_velocity: Sequence[float]) -> List[Trajectory]:
        """
        Builds the candidate set from the anchor state. With a primitive depth
        of 2 every primitive is continued by the whole family from its end state.
        """
        position = np.asarray(start_position, dtype=float)
        velocity = np.asarray(start_velocity, dtype=float)
        primitives = self._primitive_family(position, velocity)

        if self.config.primitive_depth > 1:
            extended = []
            for primitive in primitives:
                end = primitive.end_state
                for continuation in self._primitive_family(np.asarray(end.position), np.asarray(end.velocity)):
                    extended.append(primitive.extended(continuation))
            primitives = extended

        self.motion_primitives = primitives
        logger.debug(f"Generated {len(primitives)} motion primitives from {np.round(position, 1)}")
        return primitives

    # --- Validation, scoring and selection ---

    def solve(self) -> bool:
        """
        Validates every candidate and scores the valid ones. Returns whether
        any candidate is valid.
        """
        if self.checker is None:
            raise ManeuverLibraryError("ManeuverLibrary has no terrain map. Call set_terrain_map() first.")

        num_valid = 0
        for primitive in self.motion_primitives:
            primitive.validity = self.checker.is_trajectory_valid(primitive, self.config.validity_resolution)
            primitive.utility = self.utility_function(primitive) if primitive.validity else 0.0
            num_valid += primitive.validity

        if num_valid == 0:
            logger.warning(f"No valid motion primitive among {len(self.motion_primitives)} candidates")
            return False
        logger.debug(f"{num_valid}/{len(self.motion_primitives)} motion primitives valid")
        return True

    def select_primitive(self) -> Optional[Trajectory]:
        return select_trajectory(self.motion_primitives, self.selection_strategy, self.rng,
                                 self.config.selection_temperature)

    def get_random_primitive(self) -> Optional[Trajectory]:
        return select_trajectory(self.motion_primitives, SelectionStrategy.RANDOM_VALID, self.rng)

    def get_best_primitive(self) -> Optional[Trajectory]:
        return select_trajectory(self.motion_primitives, SelectionStrategy.BEST_UTILITY, self.rng)

    def get_motion_primitives(self) -> List[Trajectory]:
        return self.motion_primitives

    def get_valid_primitives(self) -> List[Trajectory]:
        return [primitive for primitive in self.motion_primitives if primitive.validity]
