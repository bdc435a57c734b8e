# terrainplanner/terrain/utils/synthetic.py
"""
Synthetic elevation rasters for demos and tests.

Grids are indexed [ix, iy] with square cells, matching TerrainMap.
"""
import numpy as np

from ..terrain_map import TerrainMap

def _grid(size_m: float, resolution: float):
    cells = int(round(size_m / resolution)) + 1
    axis = (np.arange(cells) - (cells - 1) / 2.0) * resolution
    return np.meshgrid(axis, axis, indexing="ij")

def centered_terrain_map(elevation: np.ndarray, resolution: float) -> TerrainMap:
    """Wraps a synthetic grid in a TerrainMap whose centre is the world origin."""
    half_x = 0.5 * (elevation.shape[0] - 1) * resolution
    half_y = 0.5 * (elevation.shape[1] - 1) * resolution
    return TerrainMap.from_array(elevation, resolution, origin=(-half_x, -half_y))

def flat_terrain(size_m: float, resolution: float, elevation: float = 0.0) -> np.ndarray:
    x, _ = _grid(size_m, resolution)
    return np.full_like(x, float(elevation))

def gaussian_hills(size_m: float, resolution: float, hills, base: float = 0.0) -> np.ndarray:
    """Sum of Gaussian hills, each given as (x, y, height, sigma) relative to the map centre."""
    x, y = _grid(size_m, resolution)
    elevation = np.full_like(x, float(base))
    for hx, hy, height, sigma in hills:
        elevation += height * np.exp(-((x - hx) ** 2 + (y - hy) ** 2) / (2.0 * sigma ** 2))
    return elevation

def flat_top_spike(size_m: float, resolution: float, height: float, half_width: float,
                   center=(0.0, 0.0), base: float = 0.0) -> np.ndarray:
    """Flat terrain with a square plateau of the given height."""
    x, y = _grid(size_m, resolution)
    elevation = np.full_like(x, float(base))
    inside = (np.abs(x - center[0]) <= half_width) & (np.abs(y - center[1]) <= half_width)
    elevation[inside] = base + height
    return elevation

def random_ridges(size_m: float, resolution: float, amplitude: float = 150.0,
                  seed=None) -> np.ndarray:
    """Rolling terrain built from a few random sinusoidal ridges."""
    rng = np.random.default_rng(seed)
    x, y = _grid(size_m, resolution)
    elevation = np.zeros_like(x)
    for _ in range(4):
        wavelength = rng.uniform(0.3, 1.0) * size_m
        heading = rng.uniform(0.0, np.pi)
        phase = rng.uniform(0.0, 2.0 * np.pi)
        along = x * np.cos(heading) + y * np.sin(heading)
        elevation += np.sin(2.0 * np.pi * along / wavelength + phase)
    elevation -= elevation.min()
    return amplitude * elevation / max(float(elevation.max()), 1e-9)
