# terrainplanner/path_planner/engines/registry.py
"""
Registry of search engines.

Each engine has a canonical ID, display name, description and aliases that
may be used in configuration files.
"""
from typing import Any, Dict, Optional

from ..exceptions import PlannerSetupError
from .base import SamplingPlanner
from .fmt_star import FMTStar
from .rrt_star import RRTStar

PLANNER_REGISTRY = {
    "rrtstar": {
        "name": "RRT*",
        "description": "Anytime k-nearest RRT* with goal bias and rewiring",
        "aliases": ["rrt*", "rrt_star", "rrt-star", "default"],
        "factory": RRTStar,
    },
    "fmtstar": {
        "name": "FMT*",
        "description": "Batch fast marching tree; doubles its samples after an unsolved run",
        "aliases": ["fmt*", "fmt", "fmt_star", "fmt-star"],
        "factory": FMTStar,
    },
}

def resolve_planner_alias(alias: str) -> Optional[str]:
    """
    Resolve an alias to a canonical engine ID.

    Returns None if nothing matches.
    """
    alias_lower = alias.lower().strip()
    for planner_id, info in PLANNER_REGISTRY.items():
        if alias_lower == planner_id or alias_lower in info["aliases"]:
            return planner_id
    return None

def get_planner_info(planner_id: str) -> Optional[Dict[str, Any]]:
    resolved = resolve_planner_alias(planner_id)
    if resolved is None:
        return None
    info = {key: value for key, value in PLANNER_REGISTRY[resolved].items() if key != "factory"}
    info["id"] = resolved
    return info

def create_planner(planner_id: str, **kwargs) -> SamplingPlanner:
    resolved = resolve_planner_alias(planner_id)
    if resolved is None:
        raise PlannerSetupError(f"Unknown planner '{planner_id}'. Available: {', '.join(PLANNER_REGISTRY)}")
    return PLANNER_REGISTRY[resolved]["factory"](**kwargs)
