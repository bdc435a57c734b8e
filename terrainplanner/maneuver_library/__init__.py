# terrainplanner/maneuver_library/__init__.py
"""
Receding-horizon motion primitives: generation, terrain validation, scoring
and selection.
"""
from .core import ManeuverLibrary
from .data_models import State, Trajectory, TrajectorySegments
from .exceptions import InvalidSegmentError, ManeuverLibraryError
from .utils.scoring import (
    SelectionStrategy, goal_progress_utility, select_trajectory, terrain_clearance_utility, zero_utility
)

__all__ = [
    'ManeuverLibrary',
    'State',
    'Trajectory',
    'TrajectorySegments',
    'SelectionStrategy',
    'select_trajectory',
    'zero_utility',
    'goal_progress_utility',
    'terrain_clearance_utility',
    'ManeuverLibraryError',
    'InvalidSegmentError',
]
