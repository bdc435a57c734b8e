# terrainplanner/path_planner/core.py
"""
Global terrain-aware planner.

Binds the Dubins airplane state space, the terrain validity oracle and a
path-length objective into a single-query problem, then hands it to one of
the registered sampling engines. Absence of a solution within the time budget
is reported as False, never raised.
"""
import logging
import math
import time
from typing import Optional, Sequence

import numpy as np

from ..config import PlannerConfig
from ..motion_model import DubinsAirplaneStateSpace, DubinsState, wrap_pi
from ..terrain import TerrainLayers, TerrainMap, TerrainValidityChecker
from .constants import PlannerConstants
from .data_models import Bounds, Path, PlannerData, PlannerStatus, PlanningProblem
from .engines import SamplingPlanner, create_planner
from .exceptions import PlannerSetupError
from .sampler import TerrainStateSampler

class TerrainRrtPlanner:
    """
    Plans a collision-free Dubins airplane path over a terrain map.

    Typical use:
        planner = TerrainRrtPlanner(space, config)
        planner.set_map(terrain_map)
        planner.set_bounds_from_map()
        planner.setup_problem(start_pos, start_vel, goal_pos, goal_vel)
        while not planner.solve(1.0): ...
    """
    def __init__(self, space: DubinsAirplaneStateSpace, config: Optional[PlannerConfig] = None):
        self.space = space
        self.config = config or PlannerConfig()
        self.terrain_map: Optional[TerrainMap] = None
        self.min_altitude = self.config.min_altitude
        self.max_altitude = self.config.max_altitude
        self.check_max_altitude = self.config.check_max_altitude
        self.lower_bound: Bounds = (0.0, 0.0, 0.0)
        self.upper_bound: Bounds = (0.0, 0.0, 0.0)

        self.problem: Optional[PlanningProblem] = None
        self.engine: Optional[SamplingPlanner] = None
        self.solve_duration = 0.0
        self.total_solve_time = 0.0
        self.status: Optional[PlannerStatus] = None
        self._rng = np.random.default_rng(self.config.random_seed)

        logging.info(f"TerrainRrtPlanner initialized. Engine: {self.config.planner_id}, "
                     f"turn radius: {space.min_turning_radius:.1f}m, climb policy: {space.climb_policy.value}")

    # --- Problem definition ---

    def set_map(self, terrain_map: TerrainMap) -> None:
        self.terrain_map = terrain_map

    def set_altitude_limits(self, max_altitude: float, min_altitude: float) -> None:
        """Altitude corridor above the terrain used when sampling states."""
        if not 0.0 <= min_altitude < max_altitude:
            raise PlannerSetupError(f"Invalid altitude limits: min {min_altitude}, max {max_altitude}")
        self.max_altitude = max_altitude
        self.min_altitude = min_altitude

    def set_max_altitude_collision_checks(self, check_max_altitude: bool) -> None:
        self.check_max_altitude = check_max_altitude

    def set_bounds(self, lower_bound: Sequence[float], upper_bound: Sequence[float]) -> None:
        self.lower_bound = tuple(float(v) for v in lower_bound)
        self.upper_bound = tuple(float(v) for v in upper_bound)

    def set_bounds_from_map(self) -> None:
        """
        Uses the full map extent horizontally. Vertically the bounds span the
        lowest clearance surface to the highest ceiling when those layers exist,
        otherwise the altitude corridor above the elevation range.
        """
        terrain_map = self._require_map()
        (xmin, ymin), (xmax, ymax) = terrain_map.bounds
        if terrain_map.has_layer(TerrainLayers.DISTANCE_SURFACE) and terrain_map.has_layer(TerrainLayers.MAX_ELEVATION):
            zmin = float(np.min(terrain_map.get_layer(TerrainLayers.DISTANCE_SURFACE)))
            zmax = float(np.max(terrain_map.get_layer(TerrainLayers.MAX_ELEVATION)))
        else:
            elevation = terrain_map.get_layer(TerrainLayers.ELEVATION)
            zmin = float(np.min(elevation)) + self.min_altitude
            zmax = float(np.max(elevation)) + self.max_altitude
        self.set_bounds((xmin, ymin, zmin), (xmax, ymax, zmax))
        logging.debug(f"Planner bounds: lower {self.lower_bound}, upper {self.upper_bound}")

    def setup_problem(self, start_pos: Sequence[float], start_vel: Sequence[float],
                      goal_pos: Sequence[float], goal_vel: Sequence[float]) -> None:
        """Single start and goal; headings follow the horizontal velocities."""
        start = DubinsState.from_position_velocity(start_pos, start_vel)
        goal = DubinsState.from_position_velocity(goal_pos, goal_vel)
        self._configure([start], [goal])

    def setup_loiter_problem(self, start_pos: Sequence[float], start_vel: Sequence[float],
                             goal_center: Sequence[float], goal_radius: Optional[float] = None) -> None:
        """Goal is any tangent state, in either direction, on a loiter circle around goal_center."""
        start = DubinsState.from_position_velocity(start_pos, start_vel)
        radius = self.space.min_turning_radius if goal_radius is None else abs(goal_radius)
        self._configure([start], self._circle_states(goal_center, radius, both_directions=True))

    def setup_circle_problem(self, start_center: Sequence[float], goal_center: Sequence[float],
                             start_loiter_radius: float) -> None:
        """
        Plans from a loiter circle to a loiter circle. A positive start radius
        means the vehicle circles clockwise, a negative one counter-clockwise.
        """
        starts = self._circle_states(start_center, abs(start_loiter_radius), both_directions=False,
                                     clockwise=start_loiter_radius > 0.0)
        goals = self._circle_states(goal_center, self.space.min_turning_radius, both_directions=True)
        self._configure(starts, goals)

    def _circle_states(self, center: Sequence[float], radius: float, both_directions: bool,
                       clockwise: bool = False):
        states = []
        for theta in np.linspace(-math.pi, math.pi, PlannerConstants.LOITER_GOAL_ANGLES, endpoint=False):
            x = center[0] + radius * math.cos(theta)
            y = center[1] + radius * math.sin(theta)
            if both_directions:
                yaws = (theta + 0.5 * math.pi, theta - 0.5 * math.pi)
            else:
                yaws = (theta - 0.5 * math.pi if clockwise else theta + 0.5 * math.pi,)
            states.extend(DubinsState(float(x), float(y), float(center[2]), wrap_pi(yaw)) for yaw in yaws)
        return states

    def _configure(self, starts, goals) -> None:
        terrain_map = self._require_map()
        if self.lower_bound == self.upper_bound:
            self.set_bounds_from_map()

        config = self.config
        checker = TerrainValidityChecker.from_config(terrain_map, config, check_max_altitude=self.check_max_altitude,
                                                     max_altitude=self.max_altitude)
        self.problem = PlanningProblem(
            space=self.space, checker=checker, starts=list(starts), goals=list(goals),
            lower_bound=self.lower_bound, upper_bound=self.upper_bound,
            min_altitude=self.min_altitude, max_altitude=self.max_altitude,
            validity_resolution=config.validity_resolution, planner_range=config.planner_range,
            goal_bias=config.goal_bias,
        )
        sampler = TerrainStateSampler(terrain_map, self.lower_bound, self.upper_bound,
                                      self.min_altitude, self.max_altitude, self._rng)
        self.engine = create_planner(config.planner_id, seed=int(self._rng.integers(2 ** 31)))
        self.engine.setup(self.problem, sampler)
        self.solve_duration = 0.0
        self.total_solve_time = 0.0
        self.status = None
        logging.info(f"Planning problem configured: {len(starts)} start(s), {len(goals)} goal(s), "
                     f"engine {self.engine.name}")

    def _require_map(self) -> TerrainMap:
        if self.terrain_map is None:
            raise PlannerSetupError("No terrain map set. Call set_map() first.")
        return self.terrain_map

    # --- Solving ---

    def solve(self, time_budget: Optional[float] = None, terminate_on_solution: bool = False) -> bool:
        """
        Runs the engine for up to time_budget seconds. Repeated calls continue
        the same search, so the cumulative budget grows with every call.

        Returns True once an exact solution exists.
        """
        if self.engine is None:
            raise PlannerSetupError("solve() called before a problem was set up")
        time_budget = self.config.time_budget if time_budget is None else time_budget

        start = time.perf_counter()
        self.status = self.engine.solve(time_budget, terminate_on_solution=terminate_on_solution)
        self.solve_duration = time.perf_counter() - start
        self.total_solve_time += self.solve_duration

        if self.status.solved:
            logging.info(f"Solution found: length {self.solution_path.length:.1f}m "
                         f"({self.solve_duration:.2f}s, {self.total_solve_time:.2f}s total)")
            return True
        logging.warning(f"No solution yet ({self.status.value}) after {self.total_solve_time:.2f}s")
        return False

    @property
    def solution_path(self) -> Optional[Path]:
        if self.engine is None:
            return None
        return self.engine.best_path()

    def get_solution_path(self, resolution: Optional[float] = None) -> np.ndarray:
        """Solution positions sampled at the given resolution, an empty (0, 3) array without one."""
        path = self.solution_path
        if path is None:
            return np.empty((0, 3))
        return path.position(resolution or self.config.validity_resolution)

    def get_solution_path_length(self) -> float:
        path = self.solution_path
        return math.inf if path is None else path.length

    def get_planner_data(self) -> PlannerData:
        if self.engine is None:
            return PlannerData(vertices=np.empty((0, 4)))
        return self.engine.planner_data()

    def clear(self) -> None:
        """Discards the search structure but keeps the problem definition."""
        if self.engine is not None:
            self.engine.clear()
        self.solve_duration = 0.0
        self.total_solve_time = 0.0
        self.status = None
