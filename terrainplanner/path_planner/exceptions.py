# terrainplanner/path_planner/exceptions.py

from ..exceptions import TerrainPlannerError

class PlannerError(TerrainPlannerError):
    """Base exception for global planner failures"""
    pass

class PlannerSetupError(PlannerError):
    """Raised when the planner is used before its problem is configured"""
    pass
