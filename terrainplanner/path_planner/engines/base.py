# terrainplanner/path_planner/engines/base.py
"""
Interface shared by the sampling-based search engines, plus the tree
structure they grow.

The adapter only talks to SamplingPlanner; engines are interchangeable and
selected through the registry.
"""
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from ...motion_model import DubinsAirplanePath, DubinsState, wrap_pi
from ..constants import PlannerConstants
from ..data_models import Path, PathSegment, PlannerData, PlannerStatus, PlanningProblem
from ..exceptions import PlannerSetupError
from ..sampler import TerrainStateSampler

class SearchTree:
    """
    Append-only vertex store with parent links, costs and the edge that
    reaches each vertex. Costs are path lengths from the nearest root.
    """
    def __init__(self):
        self.states: List[DubinsState] = []
        self.parents: List[int] = []
        self.costs: List[float] = []
        self.edges: List[Optional[DubinsAirplanePath]] = []
        self.children: List[set] = []
        self._positions = np.empty((64, 3))

    def __len__(self):
        return len(self.states)

    def add(self, state: DubinsState, parent: int = -1, cost: float = 0.0,
            edge: Optional[DubinsAirplanePath] = None) -> int:
        index = len(self.states)
        if index == len(self._positions):
            self._positions = np.vstack([self._positions, np.empty_like(self._positions)])
        self._positions[index] = (state.x, state.y, state.z)
        self.states.append(state)
        self.parents.append(parent)
        self.costs.append(cost)
        self.edges.append(edge)
        self.children.append(set())
        if parent >= 0:
            self.children[parent].add(index)
        return index

    @property
    def positions(self) -> np.ndarray:
        return self._positions[:len(self.states)]

    def closest_by_euclidean(self, state: DubinsState, count: int) -> np.ndarray:
        """Indices of the `count` vertices closest in straight-line distance, nearest first."""
        n = len(self.states)
        if n == 0:
            return np.empty(0, dtype=int)
        squared = np.sum((self.positions - (state.x, state.y, state.z)) ** 2, axis=1)
        count = min(count, n)
        if count < n:
            candidates = np.argpartition(squared, count - 1)[:count]
        else:
            candidates = np.arange(n)
        return candidates[np.argsort(squared[candidates])]

    def has_near_duplicate(self, state: DubinsState, position_tol: float, yaw_tol: float) -> bool:
        """Whether some vertex lies within position_tol of state with a heading within yaw_tol."""
        if not self.states:
            return False
        squared = np.sum((self.positions - (state.x, state.y, state.z)) ** 2, axis=1)
        for index in np.flatnonzero(squared <= position_tol ** 2):
            if abs(wrap_pi(self.states[index].yaw - state.yaw)) <= yaw_tol:
                return True
        return False

    def reparent(self, index: int, parent: int, edge: DubinsAirplanePath) -> None:
        """Moves a vertex under a new parent and propagates the cost change to its subtree."""
        old_parent = self.parents[index]
        if old_parent >= 0:
            self.children[old_parent].discard(index)
        self.children[parent].add(index)
        self.parents[index] = parent
        self.edges[index] = edge
        delta = self.costs[parent] + edge.length - self.costs[index]

        stack = [index]
        while stack:
            node = stack.pop()
            self.costs[node] += delta
            stack.extend(self.children[node])

    def path_to(self, index: int) -> Path:
        segments = []
        while self.parents[index] >= 0:
            segments.append(PathSegment(self.edges[index]))
            index = self.parents[index]
        segments.reverse()
        return Path(segments)

    def planner_data(self, goal_indices=()) -> PlannerData:
        vertices = np.array([(s.x, s.y, s.z, s.yaw) for s in self.states]).reshape(-1, 4)
        edges = [(p, i) for i, p in enumerate(self.parents) if p >= 0]
        starts = [i for i, p in enumerate(self.parents) if p < 0]
        return PlannerData(vertices=vertices, edges=edges, start_indices=starts, goal_indices=list(goal_indices))

def neighbour_count(n: int) -> int:
    """k for k-nearest RRT* and FMT*."""
    return max(PlannerConstants.MIN_NEIGHBOURS, int(math.ceil(PlannerConstants.K_CONSTANT * math.log(max(n, 2)))))

class SamplingPlanner(ABC):
    """
    Anytime single-query planner. Repeated solve() calls continue from the
    current search structure until clear() or a new setup().
    """
    name = "base"

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)
        self.problem: Optional[PlanningProblem] = None
        self.sampler: Optional[TerrainStateSampler] = None

    def setup(self, problem: PlanningProblem, sampler: TerrainStateSampler) -> None:
        self.problem = problem
        self.sampler = sampler
        self.clear()

    def _require_problem(self) -> PlanningProblem:
        if self.problem is None:
            raise PlannerSetupError(f"{self.name}: solve() called before setup()")
        return self.problem

    def _valid_starts_and_goals(self) -> Tuple[List[DubinsState], List[DubinsState]]:
        problem = self._require_problem()
        starts = [s for s in problem.starts if problem.checker.is_state_valid(s)]
        goals = [g for g in problem.goals if problem.checker.is_state_valid(g)]
        return starts, goals

    @abstractmethod
    def solve(self, time_budget: float, terminate_on_solution: bool = False) -> PlannerStatus:
        """Searches for up to time_budget seconds."""

    @abstractmethod
    def best_path(self) -> Optional[Path]:
        """Lowest-cost solution found so far, or None."""

    @abstractmethod
    def planner_data(self) -> PlannerData:
        """Snapshot of the search structure."""

    @abstractmethod
    def clear(self) -> None:
        """Discards the search structure and any solution."""
