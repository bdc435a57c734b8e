# terrainplanner/path_planner/engines/rrt_star.py
"""
k-nearest RRT* over the Dubins airplane state space.

Distances are directed, so choosing a parent looks at edges into the new
vertex while rewiring looks at edges out of it. Neighbour candidates are
screened by straight-line distance first, which never exceeds the Dubins
airplane distance.
"""
import logging
import math
import time
from typing import Dict, List, Optional, Tuple

from ...motion_model import DubinsState
from ..constants import PlannerConstants
from ..data_models import Path, PlannerData, PlannerStatus
from .base import SamplingPlanner, SearchTree, neighbour_count

logger = logging.getLogger(__name__)

class RRTStar(SamplingPlanner):
    name = "rrtstar"

    def clear(self) -> None:
        self.tree = SearchTree()
        self.goal_indices: List[int] = []
        self._goal_vertices: Dict[DubinsState, int] = {}
        self.iterations = 0
        self._roots_added = False
        self._valid_goals: List[DubinsState] = []

    def best_path(self) -> Optional[Path]:
        if not self.goal_indices:
            return None
        best = min(self.goal_indices, key=lambda i: self.tree.costs[i])
        return self.tree.path_to(best)

    def best_cost(self) -> float:
        if not self.goal_indices:
            return math.inf
        return min(self.tree.costs[i] for i in self.goal_indices)

    def planner_data(self) -> PlannerData:
        return self.tree.planner_data(self.goal_indices)

    def solve(self, time_budget: float, terminate_on_solution: bool = False) -> PlannerStatus:
        problem = self._require_problem()
        deadline = time.perf_counter() + time_budget

        if not self._roots_added:
            starts, goals = self._valid_starts_and_goals()
            if not starts:
                logger.warning("RRT*: no valid start state")
                return PlannerStatus.INVALID_START
            if not goals:
                logger.warning("RRT*: no valid goal state")
                return PlannerStatus.INVALID_GOAL
            for start in starts:
                self.tree.add(start)
            self._valid_goals = goals
            self._roots_added = True

        while time.perf_counter() < deadline:
            if terminate_on_solution and self.goal_indices:
                break
            self._iterate()
            self.iterations += 1
            if self.iterations % PlannerConstants.PROGRESS_LOG_INTERVAL == 0:
                logger.debug(f"RRT*: {self.iterations} iterations, {len(self.tree)} vertices, "
                             f"best cost {self.best_cost():.1f}")

        return PlannerStatus.EXACT_SOLUTION if self.goal_indices else PlannerStatus.TIMEOUT

    def _sample(self) -> Tuple[DubinsState, bool]:
        """Random state, or one of the goals with probability goal_bias. The flag marks a goal."""
        if self.rng.random() < self.problem.goal_bias:
            return self._valid_goals[self.rng.integers(len(self._valid_goals))], True
        return self.sampler.sample(), False

    def _nearest(self, target: DubinsState) -> Optional[int]:
        space = self.problem.space
        best, best_distance = None, math.inf
        for index in self.tree.closest_by_euclidean(target, PlannerConstants.NEAREST_CANDIDATES):
            distance = space.distance(self.tree.states[index], target)
            if distance < best_distance:
                best, best_distance = int(index), distance
        return best

    def _iterate(self) -> None:
        target, is_goal_sample = self._sample()
        self._extend(target)
        if is_goal_sample:
            self._connect_goal(target)

    def _extend(self, target: DubinsState) -> None:
        problem = self.problem
        tree = self.tree

        nearest = self._nearest(target)
        if nearest is None:
            return
        path = problem.space.steer(tree.states[nearest], target)
        if not path.feasible or path.length == 0.0:
            return
        if path.length > problem.planner_range:
            new_state = path.interpolate(problem.planner_range / path.length)
        else:
            new_state = path.end_state
        # Repeated goal samples steer to the same truncated state
        if tree.has_near_duplicate(new_state, PlannerConstants.DUPLICATE_POSITION_TOL_M,
                                   PlannerConstants.DUPLICATE_YAW_TOL_RAD):
            return
        if not problem.checker.is_state_valid(new_state):
            return

        k = neighbour_count(len(tree))
        candidates = tree.closest_by_euclidean(new_state, PlannerConstants.NEIGHBOUR_CANDIDATE_FACTOR * k)

        # Choose the parent giving the lowest cost-to-come through a valid edge
        incoming = []
        for index in candidates:
            edge = problem.edge(tree.states[index], new_state)
            if edge is not None:
                incoming.append((tree.costs[index] + edge.length, int(index), edge))
        incoming.sort(key=lambda item: item[0])

        parent = None
        for cost, index, edge in incoming[:k]:
            if problem.is_edge_valid(edge):
                parent = (cost, index, edge)
                break
        if parent is None:
            return

        cost, parent_index, edge = parent
        new_index = tree.add(new_state, parent_index, cost, edge)
        if problem.is_goal(new_state):
            self._record_goal(new_state, new_index)

        # Rewire neighbours that are cheaper to reach through the new vertex
        outgoing = []
        for index in candidates:
            index = int(index)
            if index == parent_index:
                continue
            edge = problem.edge(new_state, tree.states[index])
            if edge is not None and cost + edge.length < tree.costs[index]:
                outgoing.append((cost + edge.length, index, edge))
        outgoing.sort(key=lambda item: item[0])
        for new_cost, index, edge in outgoing[:k]:
            if new_cost < tree.costs[index] and problem.is_edge_valid(edge):
                tree.reparent(index, new_index, edge)

    def _connect_goal(self, goal: DubinsState) -> None:
        """
        Links the goal straight to the cheapest of the vertices around it,
        ranked by cost-to-come plus Dubins distance rather than by position.
        An existing goal vertex is re-parented when that lowers its cost.
        """
        problem = self.problem
        tree = self.tree
        existing = self._goal_vertices.get(goal)
        best_cost = tree.costs[existing] if existing is not None else math.inf

        incoming = []
        for index in tree.closest_by_euclidean(goal, PlannerConstants.GOAL_CONNECT_CANDIDATES):
            index = int(index)
            if index == existing:
                continue
            edge = problem.edge(tree.states[index], goal)
            if edge is not None and tree.costs[index] + edge.length < best_cost:
                incoming.append((tree.costs[index] + edge.length, index, edge))
        incoming.sort(key=lambda item: item[0])

        for cost, index, edge in incoming[:neighbour_count(len(tree))]:
            if not problem.is_edge_valid(edge):
                continue
            if existing is None:
                self._record_goal(goal, tree.add(goal, index, cost, edge))
            else:
                tree.reparent(existing, index, edge)
            return

    def _record_goal(self, goal: DubinsState, index: int) -> None:
        self._goal_vertices[goal] = index
        self.goal_indices.append(index)
        logger.debug(f"RRT*: reached goal with cost {self.tree.costs[index]:.1f} after {self.iterations} iterations")
