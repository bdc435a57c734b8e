# terrainplanner/terrain/constants.py

class TerrainLayers:
    """Names of the raster layers held by a TerrainMap."""
    ELEVATION = "elevation"
    DISTANCE_SURFACE = "distance_surface"
    MAX_ELEVATION = "max_elevation"
    ICS_PLUS = "ics_+"
    ICS_MINUS = "ics_-"
    SAFETY = "safety"
    COLOR = "color"

class TerrainConstants:
    # Surfaces derived from the elevation by spherical dilation (metres above terrain)
    DISTANCE_SURFACE_M: float = 50.0
    MAX_ELEVATION_M: float = 120.0

    # Perimeter samples when checking a loiter circle for inevitable collision
    LOITER_CHECK_STEPS: int = 24

    MIN_CELLS_PER_AXIS: int = 2
