# terrainplanner/path_planner/engines/fmt_star.py
"""
Batch Fast Marching Tree (FMT*) with k-nearest neighbourhoods.

A fixed set of valid samples is drawn up front and the tree is marched
outwards from the start in order of cost-to-come. When a run ends without a
solution the sample count is doubled for the next solve() call.
"""
import heapq
import logging
import time
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from ...motion_model import DubinsState
from ..constants import PlannerConstants
from ..data_models import Path, PlannerData, PlannerStatus
from .base import SamplingPlanner, SearchTree, neighbour_count

logger = logging.getLogger(__name__)

class FMTStar(SamplingPlanner):
    name = "fmtstar"

    def __init__(self, seed: Optional[int] = None, num_samples: int = PlannerConstants.FMT_INITIAL_SAMPLES):
        super().__init__(seed)
        self.initial_samples = num_samples

    def clear(self) -> None:
        self.num_samples = self.initial_samples
        self.samples: List[DubinsState] = []
        self.tree = SearchTree()
        self.goal_index: Optional[int] = None

    def best_path(self) -> Optional[Path]:
        if self.goal_index is None:
            return None
        return self.tree.path_to(self.goal_index)

    def planner_data(self) -> PlannerData:
        goals = [] if self.goal_index is None else [self.goal_index]
        return self.tree.planner_data(goals)

    def solve(self, time_budget: float, terminate_on_solution: bool = False) -> PlannerStatus:
        # A batch run has no anytime refinement, so a found solution is final
        if self.goal_index is not None:
            return PlannerStatus.EXACT_SOLUTION

        problem = self._require_problem()
        deadline = time.perf_counter() + time_budget
        starts, goals = self._valid_starts_and_goals()
        if not starts:
            logger.warning("FMT*: no valid start state")
            return PlannerStatus.INVALID_START
        if not goals:
            logger.warning("FMT*: no valid goal state")
            return PlannerStatus.INVALID_GOAL

        self._draw_samples(deadline)
        nodes = starts + goals + self.samples
        completed = self._march(nodes, len(starts), set(range(len(starts), len(starts) + len(goals))), deadline)

        if self.goal_index is not None:
            logger.info(f"FMT*: solution with cost {self.tree.costs[self.goal_index]:.1f} "
                        f"using {len(self.samples)} samples")
            return PlannerStatus.EXACT_SOLUTION
        if completed:
            self.num_samples *= 2
            logger.debug(f"FMT*: no solution with {len(self.samples)} samples, next run uses {self.num_samples}")
        return PlannerStatus.TIMEOUT

    def _draw_samples(self, deadline: float) -> None:
        checker = self.problem.checker
        attempts = 0
        max_attempts = PlannerConstants.FMT_MAX_SAMPLE_ATTEMPTS * self.num_samples
        while len(self.samples) < self.num_samples and attempts < max_attempts:
            if time.perf_counter() > deadline:
                break
            state = self.sampler.sample()
            attempts += 1
            if checker.is_state_valid(state):
                self.samples.append(state)

    def _march(self, nodes: List[DubinsState], num_starts: int, goal_ids: set, deadline: float) -> bool:
        """Runs one FMT* pass over nodes. Returns False when the deadline interrupted it."""
        problem = self.problem
        space = problem.space
        self.tree = SearchTree()

        positions = np.array([(s.x, s.y, s.z) for s in nodes])
        kdtree = cKDTree(positions)
        k = neighbour_count(len(nodes))
        screened = min(len(nodes), PlannerConstants.NEIGHBOUR_CANDIDATE_FACTOR * k + 1)

        out_cache: Dict[int, List[int]] = {}
        in_cache: Dict[int, List[int]] = {}

        def candidates(i: int) -> List[int]:
            _, idx = kdtree.query(positions[i], k=screened)
            return [int(j) for j in np.atleast_1d(idx) if j != i]

        def out_neighbours(i: int) -> List[int]:
            if i not in out_cache:
                scored = sorted(candidates(i), key=lambda j: space.distance(nodes[i], nodes[j]))
                out_cache[i] = scored[:k]
            return out_cache[i]

        def in_neighbours(i: int) -> List[int]:
            if i not in in_cache:
                scored = sorted(candidates(i), key=lambda j: space.distance(nodes[j], nodes[i]))
                in_cache[i] = scored[:k]
            return in_cache[i]

        tree_index: Dict[int, int] = {}
        cost: Dict[int, float] = {}
        open_heap = []
        for i in range(num_starts):
            tree_index[i] = self.tree.add(nodes[i])
            cost[i] = 0.0
            heapq.heappush(open_heap, (0.0, i))
        open_set = set(range(num_starts))
        unvisited = set(range(num_starts, len(nodes)))

        while open_heap:
            if time.perf_counter() > deadline:
                return False
            _, z = heapq.heappop(open_heap)
            if z not in open_set:
                continue
            if z in goal_ids:
                self.goal_index = tree_index[z]
                return True

            for x in out_neighbours(z):
                if x not in unvisited:
                    continue
                best = None
                for y in in_neighbours(x):
                    if y not in open_set:
                        continue
                    edge = problem.edge(nodes[y], nodes[x])
                    if edge is None:
                        continue
                    candidate = cost[y] + edge.length
                    if best is None or candidate < best[0]:
                        best = (candidate, y, edge)
                if best is None:
                    continue
                x_cost, y, edge = best
                if not problem.is_edge_valid(edge):
                    continue
                tree_index[x] = self.tree.add(nodes[x], tree_index[y], x_cost, edge)
                cost[x] = x_cost
                unvisited.discard(x)
                open_set.add(x)
                heapq.heappush(open_heap, (x_cost, x))

            open_set.discard(z)
        return True
