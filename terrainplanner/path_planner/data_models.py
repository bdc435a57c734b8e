# terrainplanner/path_planner/data_models.py
"""
Data structures exchanged between the planning adapter and its search engines.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from ..motion_model import DubinsAirplanePath, DubinsAirplaneStateSpace, DubinsState
from ..terrain import TerrainValidityChecker

Bounds = Tuple[float, float, float]

class PlannerStatus(Enum):
    EXACT_SOLUTION = "exact solution"
    TIMEOUT = "timeout"
    INVALID_START = "invalid start"
    INVALID_GOAL = "invalid goal"

    @property
    def solved(self) -> bool:
        return self is PlannerStatus.EXACT_SOLUTION

@dataclass
class PlanningProblem:
    """A single-query problem: reach any goal state from any start state."""
    space: DubinsAirplaneStateSpace
    checker: TerrainValidityChecker
    starts: List[DubinsState]
    goals: List[DubinsState]
    lower_bound: Bounds
    upper_bound: Bounds
    min_altitude: float
    max_altitude: float
    validity_resolution: float = 10.0
    planner_range: float = 300.0
    goal_bias: float = 0.05

    def is_goal(self, state: DubinsState) -> bool:
        return any(state == goal for goal in self.goals)

    def edge(self, start: DubinsState, goal: DubinsState) -> Optional[DubinsAirplanePath]:
        """The path from start to goal, or None when it cannot end exactly at goal."""
        path = self.space.steer(start, goal)
        return path if path.reaches_goal else None

    def is_edge_valid(self, path: DubinsAirplanePath) -> bool:
        return self.checker.is_path_valid(self.space, path, self.validity_resolution)

@dataclass(frozen=True)
class PathSegment:
    """One Dubins airplane edge of a solution."""
    path: DubinsAirplanePath

    @property
    def start(self) -> DubinsState:
        return self.path.start

    @property
    def end(self) -> DubinsState:
        return self.path.goal

    @property
    def length(self) -> float:
        return self.path.length

    def sample(self, resolution: float) -> List[DubinsState]:
        fractions = DubinsAirplaneStateSpace.sample_fractions(self.path.length, resolution)
        return [self.path.interpolate(float(t)) for t in fractions]

@dataclass
class Path:
    """A solution path as an ordered chain of segments."""
    segments: List[PathSegment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def length(self) -> float:
        return sum(segment.length for segment in self.segments)

    def states(self) -> List[DubinsState]:
        """Vertices of the path, start first."""
        if self.is_empty:
            return []
        return [self.segments[0].start] + [segment.end for segment in self.segments]

    def sample(self, resolution: float) -> List[DubinsState]:
        """Dense states along the path; shared segment endpoints appear once."""
        samples: List[DubinsState] = []
        for segment in self.segments:
            states = segment.sample(resolution)
            samples.extend(states if not samples else states[1:])
        return samples

    def position(self, resolution: float) -> np.ndarray:
        samples = self.sample(resolution)
        if not samples:
            return np.empty((0, 3))
        return np.array([state.position for state in samples])

@dataclass
class PlannerData:
    """Snapshot of a search tree, for inspection and plotting only."""
    vertices: np.ndarray                              # (N, 4): x, y, z, yaw
    edges: List[Tuple[int, int]] = field(default_factory=list)
    start_indices: List[int] = field(default_factory=list)
    goal_indices: List[int] = field(default_factory=list)

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_edges(self) -> int:
        return len(self.edges)
