# terrainplanner/path_planner/__init__.py
"""
Global planner: binds the motion model and terrain oracle into a single-query
problem solved by a swappable sampling-based engine.
"""
from .core import TerrainRrtPlanner
from .data_models import Path, PathSegment, PlannerData, PlannerStatus, PlanningProblem
from .engines import PLANNER_REGISTRY, FMTStar, RRTStar, SamplingPlanner, create_planner, resolve_planner_alias
from .exceptions import PlannerError, PlannerSetupError
from .sampler import TerrainStateSampler

__all__ = [
    "TerrainRrtPlanner",
    "Path",
    "PathSegment",
    "PlannerData",
    "PlannerStatus",
    "PlanningProblem",
    "SamplingPlanner",
    "RRTStar",
    "FMTStar",
    "PLANNER_REGISTRY",
    "create_planner",
    "resolve_planner_alias",
    "TerrainStateSampler",
    "PlannerError",
    "PlannerSetupError",
]
