# terrainplanner/terrain/validity_checker.py
"""
Terrain validity oracle.

Answers whether a position, a Dubins airplane edge or a sampled trajectory is
admissible over a TerrainMap. Queries are raster lookups with no side effects.
Out-of-bounds and infeasible queries resolve to "invalid" rather than raising.
"""
import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..exceptions import ConfigurationError
from ..motion_model import DubinsAirplanePath, DubinsAirplaneStateSpace, DubinsState
from .constants import TerrainConstants, TerrainLayers
from .exceptions import LayerNotFoundError
from .terrain_map import TerrainMap

logger = logging.getLogger(__name__)

def densify_polyline(positions: np.ndarray, resolution: float) -> np.ndarray:
    """
    Inserts evenly spaced points so no two consecutive points are further apart
    than resolution. Segments with a non-finite end are kept as they are.
    """
    points = [positions[:1]]
    for a, b in zip(positions[:-1], positions[1:]):
        length = np.linalg.norm(b - a)
        steps = max(1, math.ceil(length / resolution)) if math.isfinite(length) else 1
        fractions = np.linspace(0.0, 1.0, steps + 1)[1:, None]
        points.append(a + fractions * (b - a))
    return np.vstack(points)

class TerrainValidityChecker:
    """
    Checks clearance above the terrain, with optional ceiling and
    recoverability checks.
    """
    def __init__(self, terrain_map: TerrainMap, safety_margin: float = TerrainConstants.DISTANCE_SURFACE_M,
                 check_max_altitude: bool = False, max_altitude: Optional[float] = None,
                 use_safety_layer: bool = False):
        if safety_margin < 0.0:
            raise ConfigurationError("safety_margin", safety_margin, "Safety margin must be non-negative")
        if check_max_altitude and max_altitude is None and not terrain_map.has_layer(TerrainLayers.MAX_ELEVATION):
            raise ConfigurationError("max_altitude", max_altitude,
                                     "Ceiling check needs max_altitude or a max_elevation layer")
        if use_safety_layer and not terrain_map.has_layer(TerrainLayers.SAFETY):
            raise LayerNotFoundError(TerrainLayers.SAFETY, terrain_map.layers)

        self.terrain_map = terrain_map
        self.safety_margin = float(safety_margin)
        self.check_max_altitude = check_max_altitude
        self.max_altitude = max_altitude
        self.use_safety_layer = use_safety_layer

        logger.debug(f"Validity checker: margin {self.safety_margin}m, ceiling check {check_max_altitude}, "
                     f"safety layer {use_safety_layer}")

    @classmethod
    def from_config(cls, terrain_map: TerrainMap, config, check_max_altitude: Optional[bool] = None,
                    max_altitude: Optional[float] = None) -> "TerrainValidityChecker":
        """
        Checker for a PlannerConfig, with optional overrides of its ceiling
        settings. A derived max_elevation layer takes precedence over the
        relative ceiling, so every caller bounds altitude the same way.
        """
        check = config.check_max_altitude if check_max_altitude is None else check_max_altitude
        ceiling = config.max_altitude if max_altitude is None else max_altitude
        if terrain_map.has_layer(TerrainLayers.MAX_ELEVATION):
            ceiling = None
        return cls(terrain_map, safety_margin=config.safety_margin, check_max_altitude=check,
                   max_altitude=ceiling, use_safety_layer=config.use_safety_layer)

    def clearance(self, position: Sequence[float]) -> float:
        """Height above the terrain, or -inf outside the map or for a non-finite position."""
        x, y, z = position[0], position[1], position[2]
        if not (math.isfinite(z) and self.terrain_map.is_inside(x, y)):
            return -math.inf
        return z - self.terrain_map.at_position(TerrainLayers.ELEVATION, x, y)

    def is_valid(self, position: Sequence[float]) -> bool:
        x, y, z = position[0], position[1], position[2]
        if not (math.isfinite(z) and self.terrain_map.is_inside(x, y)):
            return False

        terrain_map = self.terrain_map
        elevation = terrain_map.at_position(TerrainLayers.ELEVATION, x, y)
        if z - elevation < self.safety_margin:
            return False

        if self.check_max_altitude:
            if self.max_altitude is not None:
                ceiling = elevation + self.max_altitude
            else:
                ceiling = terrain_map.at_position(TerrainLayers.MAX_ELEVATION, x, y)
            if z > ceiling:
                return False

        if self.use_safety_layer and terrain_map.at_position(TerrainLayers.SAFETY, x, y) < 0.0:
            return False
        return True

    def is_state_valid(self, state: DubinsState) -> bool:
        return self.is_valid((state.x, state.y, state.z))

    def is_path_valid(self, space: DubinsAirplaneStateSpace, path: DubinsAirplanePath, resolution: float) -> bool:
        """Checks every sample of an edge at the given resolution, both ends included."""
        if not path.feasible:
            return False
        for t in space.sample_fractions(path.length, resolution):
            if not self.is_state_valid(path.interpolate(float(t))):
                return False
        return True

    def is_motion_valid(self, space: DubinsAirplaneStateSpace, start: DubinsState, goal: DubinsState,
                        resolution: float) -> bool:
        return self.is_path_valid(space, space.steer(start, goal), resolution)

    def is_trajectory_valid(self, trajectory, resolution: Optional[float] = None) -> bool:
        """
        A trajectory is admissible only if every one of its states is. With a
        resolution, straight segments between states spaced further apart are
        sampled as well.
        """
        positions = np.asarray(trajectory.position(), dtype=float)
        if len(positions) == 0 or not np.all(np.isfinite(positions)):
            return False
        if resolution and resolution > 0.0 and len(positions) > 1:
            positions = densify_polyline(positions, resolution)
        return all(self.is_valid(p) for p in positions)

    def is_loiter_circle_valid(self, center: Sequence[float], radius: float,
                               num_steps: int = TerrainConstants.LOITER_CHECK_STEPS) -> bool:
        """
        Approximate inevitable-collision check: the centre and the perimeter of a
        loiter circle at the centre altitude must all be admissible.
        """
        if not self.is_valid(center):
            return False
        for theta in np.linspace(-math.pi, math.pi, num_steps):
            point = (center[0] + radius * math.cos(theta), center[1] + radius * math.sin(theta), center[2])
            if not self.is_valid(point):
                return False
        return True
