# terrainplanner/replanning/__init__.py
from .core import TerrainPlanner
from .data_models import CycleReport, ReferenceTrajectory, VehicleStateEstimate

__all__ = [
    'TerrainPlanner',
    'CycleReport',
    'ReferenceTrajectory',
    'VehicleStateEstimate',
]
