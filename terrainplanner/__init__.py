# terrainplanner/__init__.py
"""
Terrain-aware flight planning for fixed-wing aircraft: Dubins airplane
motion model, terrain validity checks, sampling-based global planning and a
receding-horizon maneuver library.
"""
__version__ = "0.1.0"
