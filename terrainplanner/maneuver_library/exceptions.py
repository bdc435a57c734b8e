# terrainplanner/maneuver_library/exceptions.py

from ..exceptions import TerrainPlannerError

class ManeuverLibraryError(TerrainPlannerError):
    """Base exception for maneuver library failures"""
    pass

class InvalidSegmentError(ManeuverLibraryError):
    """Raised when an invalid trajectory is appended to a segment assembly"""
    pass
