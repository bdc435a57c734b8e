# terrainplanner/terrain/__init__.py
"""
Terrain raster with derived safety layers, and the validity oracle that
checks positions, edges and trajectories against it.
"""
from .constants import TerrainConstants, TerrainLayers
from .exceptions import TerrainMapError, LayerNotFoundError, TerrainMapFrozenError, TerrainLoadError
from .terrain_map import TerrainMap
from .validity_checker import TerrainValidityChecker

__all__ = [
    "TerrainMap",
    "TerrainValidityChecker",
    "TerrainLayers",
    "TerrainConstants",
    "TerrainMapError",
    "LayerNotFoundError",
    "TerrainMapFrozenError",
    "TerrainLoadError",
]
