# terrainplanner/maneuver_library/utils/scoring.py
"""
Utility functions and selection strategies for candidate primitives.

A utility function maps a Trajectory to a float; higher is better. All of
them are deterministic functions of the trajectory states.
"""
import math
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from ...terrain import TerrainLayers, TerrainMap
from ..data_models import Trajectory

UtilityFunction = Callable[[Trajectory], float]

def zero_utility(trajectory: Trajectory) -> float:
    return 0.0

def goal_progress_utility(goal: Sequence[float]) -> UtilityFunction:
    """Distance closed towards the goal between the first and last state."""
    goal = np.asarray(goal, dtype=float)

    def utility(trajectory: Trajectory) -> float:
        positions = trajectory.position()
        if len(positions) == 0:
            return -math.inf
        return float(np.linalg.norm(positions[0] - goal) - np.linalg.norm(positions[-1] - goal))
    return utility

def terrain_clearance_utility(terrain_map: TerrainMap) -> UtilityFunction:
    """Smallest height above the terrain along the trajectory."""
    def utility(trajectory: Trajectory) -> float:
        positions = trajectory.position()
        if len(positions) == 0:
            return -math.inf
        elevation = terrain_map.sample_layer(TerrainLayers.ELEVATION, positions[:, 0], positions[:, 1])
        clearance = positions[:, 2] - elevation
        # Out-of-map samples read as nan
        return float(np.min(np.where(np.isnan(clearance), -math.inf, clearance)))
    return utility

class SelectionStrategy(str, Enum):
    BEST_UTILITY = "best_utility"   # highest utility, ties go to the lowest index
    RANDOM_VALID = "random"         # uniform draw among valid candidates
    WEIGHTED = "weighted"           # softmax over utility

def select_trajectory(candidates: List[Trajectory], strategy: SelectionStrategy, rng: np.random.Generator,
                      temperature: float = 1.0) -> Optional[Trajectory]:
    """Picks one valid candidate, or None when none is valid."""
    valid = [trajectory for trajectory in candidates if trajectory.validity]
    if not valid:
        return None

    strategy = SelectionStrategy(strategy)
    if strategy == SelectionStrategy.BEST_UTILITY:
        best = max(range(len(valid)), key=lambda i: (valid[i].utility, -i))
        return valid[best]
    if strategy == SelectionStrategy.RANDOM_VALID:
        return valid[int(rng.integers(len(valid)))]

    utilities = np.array([trajectory.utility for trajectory in valid], dtype=float)
    finite = np.isfinite(utilities)
    if not np.any(finite):
        return valid[int(rng.integers(len(valid)))]
    shifted = np.where(finite, utilities - np.max(utilities[finite]), -np.inf) / temperature
    weights = np.exp(shifted)
    return valid[int(rng.choice(len(valid), p=weights / weights.sum()))]
