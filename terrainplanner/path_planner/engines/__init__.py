# terrainplanner/path_planner/engines/__init__.py
from .base import SamplingPlanner, SearchTree
from .fmt_star import FMTStar
from .registry import PLANNER_REGISTRY, create_planner, get_planner_info, resolve_planner_alias
from .rrt_star import RRTStar

__all__ = [
    "SamplingPlanner",
    "SearchTree",
    "RRTStar",
    "FMTStar",
    "PLANNER_REGISTRY",
    "create_planner",
    "get_planner_info",
    "resolve_planner_alias",
]
