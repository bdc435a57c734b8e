# terrainplanner/terrain/utils/layers.py
"""
Raster operations used to derive safety layers from an elevation grid.

All radii are in metres and converted to cells with the map resolution.
Borders are extended with the nearest cell so edge cells are not treated as
open air.
"""
import math

import numpy as np
from scipy import ndimage

def disk_footprint(radius: float, resolution: float) -> np.ndarray:
    """Boolean disk of cells whose centres lie within radius of the centre cell."""
    half = int(math.floor(abs(radius) / resolution))
    offsets = np.arange(-half, half + 1) * resolution
    dx, dy = np.meshgrid(offsets, offsets, indexing="ij")
    return dx ** 2 + dy ** 2 <= radius ** 2 + 1e-9

def spherical_dilation(elevation: np.ndarray, distance: float, resolution: float) -> np.ndarray:
    """
    Upper envelope of spheres of the given radius centred on every terrain cell.

    Each output cell holds the highest point of any sphere above it, which is
    the surface lying `distance` metres from the terrain in 3D.
    """
    footprint = disk_footprint(distance, resolution)
    half = footprint.shape[0] // 2
    offsets = np.arange(-half, half + 1) * resolution
    dx, dy = np.meshgrid(offsets, offsets, indexing="ij")
    heights = np.sqrt(np.clip(distance ** 2 - dx ** 2 - dy ** 2, 0.0, None))
    # grey_dilation adds the structure values to the shifted input before taking the max
    return ndimage.grey_dilation(elevation, footprint=footprint, structure=np.where(footprint, heights, 0.0),
                                 mode="nearest")

def horizontal_envelope(surface: np.ndarray, radius: float, resolution: float) -> np.ndarray:
    """
    Disk maximum of surface for a positive radius, disk minimum for a negative one.
    """
    footprint = disk_footprint(radius, resolution)
    if radius >= 0.0:
        return ndimage.maximum_filter(surface, footprint=footprint, mode="nearest")
    return ndimage.minimum_filter(surface, footprint=footprint, mode="nearest")
