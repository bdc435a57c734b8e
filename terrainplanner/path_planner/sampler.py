# terrainplanner/path_planner/sampler.py
"""
State sampler that keeps samples inside the altitude corridor above the terrain.
"""
import math
from typing import Optional

import numpy as np

from ..motion_model import DubinsState
from ..terrain import TerrainLayers, TerrainMap
from .data_models import Bounds

class TerrainStateSampler:
    """
    Draws x, y uniformly within the planning bounds and places z uniformly
    between min_altitude and max_altitude above the local elevation.
    """
    def __init__(self, terrain_map: Optional[TerrainMap], lower_bound: Bounds, upper_bound: Bounds,
                 min_altitude: float, max_altitude: float, rng: np.random.Generator):
        self.terrain_map = terrain_map
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.min_altitude = min_altitude
        self.max_altitude = max_altitude
        self.rng = rng

    def sample(self) -> DubinsState:
        x = self.rng.uniform(self.lower_bound[0], self.upper_bound[0])
        y = self.rng.uniform(self.lower_bound[1], self.upper_bound[1])
        yaw = self.rng.uniform(-math.pi, math.pi)

        elevation = math.nan
        if self.terrain_map is not None:
            elevation = self.terrain_map.at_position(TerrainLayers.ELEVATION, x, y)
        if math.isnan(elevation):
            z = self.rng.uniform(self.lower_bound[2], self.upper_bound[2])
        else:
            z = elevation + self.rng.uniform(self.min_altitude, self.max_altitude)
        return DubinsState(float(x), float(y), float(z), float(yaw))
