# terrainplanner/terrain/exceptions.py

from ..exceptions import TerrainPlannerError

class TerrainMapError(TerrainPlannerError):
    """Base exception for terrain map failures"""
    pass

class LayerNotFoundError(TerrainMapError):
    """Raised when a layer is requested that the map does not hold"""
    def __init__(self, layer: str, available=()):
        self.layer = layer
        super().__init__(f"Layer '{layer}' not found. Available layers: {', '.join(available) or 'none'}")

class TerrainMapFrozenError(TerrainMapError):
    """Raised when a finalized map is asked to derive or replace a layer"""
    pass

class TerrainLoadError(TerrainMapError):
    """Raised when a terrain raster cannot be read or has an unusable shape"""
    pass
