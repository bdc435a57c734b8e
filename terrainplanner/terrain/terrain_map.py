# terrainplanner/terrain/terrain_map.py
"""
Multi-layer elevation raster with the derived safety layers used for planning.

Layers are 2D arrays indexed [ix, iy]; cell [0, 0] is centred on `origin` and
cells are square with side `resolution`. Derived layers are computed once
during preprocessing. After finalize() every layer is read-only, so the map can
be shared by the planning threads without copies.
"""
import logging
import math
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np
from scipy import ndimage

from .constants import TerrainConstants, TerrainLayers
from .exceptions import LayerNotFoundError, TerrainLoadError, TerrainMapFrozenError
from .utils.layers import horizontal_envelope, spherical_dilation

logger = logging.getLogger(__name__)

class TerrainMap:
    """Elevation raster plus named derived layers."""

    def __init__(self, elevation: np.ndarray, resolution: float, origin: Tuple[float, float] = (0.0, 0.0)):
        elevation = np.asarray(elevation, dtype=float)
        if elevation.ndim != 2 or min(elevation.shape) < TerrainConstants.MIN_CELLS_PER_AXIS:
            raise TerrainLoadError(f"Elevation must be a 2D grid of at least "
                                   f"{TerrainConstants.MIN_CELLS_PER_AXIS} cells per axis, got shape {elevation.shape}")
        if not np.all(np.isfinite(elevation)):
            raise TerrainLoadError("Elevation contains non-finite values")
        if not resolution > 0.0:
            raise TerrainLoadError(f"Resolution must be positive, got {resolution}")

        self.resolution = float(resolution)
        self.origin = (float(origin[0]), float(origin[1]))
        self.timestamp = time.time()
        self._layers: Dict[str, np.ndarray] = {TerrainLayers.ELEVATION: elevation.copy()}
        self._frozen = False

    @classmethod
    def from_array(cls, elevation: np.ndarray, resolution: float,
                   origin: Tuple[float, float] = (0.0, 0.0)) -> "TerrainMap":
        return cls(elevation, resolution, origin)

    @classmethod
    def load(cls, path: Union[str, Path], resolution: Optional[float] = None,
             origin: Optional[Tuple[float, float]] = None) -> "TerrainMap":
        """
        Loads an elevation raster from a .npy or .npz file.

        A .npz archive holds an `elevation` array and may carry `resolution`,
        `origin` and `color` entries; explicit arguments take precedence. A .npy
        file holds the bare elevation array and needs an explicit resolution.
        """
        path = Path(path)
        if not path.is_file():
            raise TerrainLoadError(f"Terrain file not found: {path}")

        try:
            if path.suffix == ".npy":
                elevation, color = np.load(path), None
            elif path.suffix == ".npz":
                with np.load(path) as archive:
                    if TerrainLayers.ELEVATION not in archive:
                        raise TerrainLoadError(f"{path} has no '{TerrainLayers.ELEVATION}' array")
                    elevation = archive[TerrainLayers.ELEVATION]
                    color = archive[TerrainLayers.COLOR] if TerrainLayers.COLOR in archive else None
                    if resolution is None and "resolution" in archive:
                        resolution = float(archive["resolution"])
                    if origin is None and "origin" in archive:
                        origin = tuple(archive["origin"])
            else:
                raise TerrainLoadError(f"Unsupported terrain format '{path.suffix}', expected .npy or .npz")
        except (OSError, ValueError) as e:
            raise TerrainLoadError(f"Could not read terrain file {path}: {e}") from e

        if resolution is None:
            raise TerrainLoadError(f"No resolution given for {path}")

        terrain_map = cls(elevation, resolution, origin or (0.0, 0.0))
        if color is not None:
            terrain_map.add_color_layer(color)
        logger.info(f"Loaded terrain {path.name}: {terrain_map.shape[0]}x{terrain_map.shape[1]} cells "
                    f"at {terrain_map.resolution}m")
        return terrain_map

    # --- Geometry ---

    @property
    def shape(self) -> Tuple[int, int]:
        return self._layers[TerrainLayers.ELEVATION].shape

    @property
    def length(self) -> Tuple[float, float]:
        """Extent of the map in metres along x and y."""
        return ((self.shape[0] - 1) * self.resolution, (self.shape[1] - 1) * self.resolution)

    @property
    def bounds(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        length = self.length
        return (self.origin, (self.origin[0] + length[0], self.origin[1] + length[1]))

    @property
    def center(self) -> Tuple[float, float]:
        length = self.length
        return (self.origin[0] + 0.5 * length[0], self.origin[1] + 0.5 * length[1])

    def is_inside(self, x: float, y: float) -> bool:
        (xmin, ymin), (xmax, ymax) = self.bounds
        return xmin <= x <= xmax and ymin <= y <= ymax

    # --- Layers ---

    @property
    def layers(self) -> Tuple[str, ...]:
        return tuple(self._layers)

    @property
    def is_finalized(self) -> bool:
        return self._frozen

    def has_layer(self, name: str) -> bool:
        return name in self._layers

    def get_layer(self, name: str) -> np.ndarray:
        try:
            return self._layers[name]
        except KeyError:
            raise LayerNotFoundError(name, self.layers) from None

    def at_position(self, layer: str, x: float, y: float) -> float:
        """
        Bilinear lookup of a layer at a world position. Returns nan outside the map.
        """
        data = self.get_layer(layer)
        fx = (x - self.origin[0]) / self.resolution
        fy = (y - self.origin[1]) / self.resolution
        nx, ny = data.shape[0], data.shape[1]
        if not (0.0 <= fx <= nx - 1 and 0.0 <= fy <= ny - 1):
            return math.nan
        ix = min(int(fx), nx - 2)
        iy = min(int(fy), ny - 2)
        tx, ty = fx - ix, fy - iy
        return float((1.0 - tx) * (1.0 - ty) * data[ix, iy] + tx * (1.0 - ty) * data[ix + 1, iy]
                     + (1.0 - tx) * ty * data[ix, iy + 1] + tx * ty * data[ix + 1, iy + 1])

    def sample_layer(self, layer: str, xs, ys) -> np.ndarray:
        """Vectorised bilinear lookup; positions outside the map read as nan."""
        data = self.get_layer(layer)
        fx = (np.asarray(xs, dtype=float) - self.origin[0]) / self.resolution
        fy = (np.asarray(ys, dtype=float) - self.origin[1]) / self.resolution
        values = ndimage.map_coordinates(data, np.vstack([fx.ravel(), fy.ravel()]), order=1, mode="nearest")
        outside = (fx.ravel() < 0) | (fx.ravel() > data.shape[0] - 1) | (fy.ravel() < 0) | (fy.ravel() > data.shape[1] - 1)
        values[outside] = np.nan
        return values.reshape(fx.shape)

    def _set_layer(self, name: str, data: np.ndarray) -> None:
        if self._frozen:
            raise TerrainMapFrozenError(f"Cannot write layer '{name}': terrain map is finalized")
        self._layers[name] = data

    def add_color_layer(self, color: Union[np.ndarray, str, Path]) -> None:
        """Attaches a color overlay, given as an array or a .npy file, matching the elevation grid."""
        if isinstance(color, (str, Path)):
            try:
                color = np.load(color)
            except (OSError, ValueError) as e:
                raise TerrainLoadError(f"Could not read color layer {color}: {e}") from e
        color = np.asarray(color)
        if color.shape[:2] != self.shape:
            raise TerrainLoadError(f"Color layer shape {color.shape[:2]} does not match elevation {self.shape}")
        self._set_layer(TerrainLayers.COLOR, color.copy())

    # --- Layer derivation ---

    def add_layer_distance_transform(self, distance: float, name: str) -> None:
        """Adds the surface lying `distance` metres from the terrain in 3D."""
        elevation = self.get_layer(TerrainLayers.ELEVATION)
        self._set_layer(name, spherical_dilation(elevation, distance, self.resolution))

    def add_layer_horizontal_distance_transform(self, radius: float, name: str, surface: str) -> None:
        """
        Adds the disk maximum (radius > 0) or disk minimum (radius < 0) of a surface.

        With the turning radius this gives the altitude band in which a loiter
        circle centred on the cell stays clear of the surface.
        """
        self._set_layer(name, horizontal_envelope(self.get_layer(surface), radius, self.resolution))

    def add_layer_safety(self, name: str, lower: str, upper: str) -> None:
        """Adds upper - lower. Cells where the result is non-negative are recoverable."""
        self._set_layer(name, self.get_layer(upper) - self.get_layer(lower))

    def derive_default_layers(self, turn_radius: float,
                              distance_surface: float = TerrainConstants.DISTANCE_SURFACE_M,
                              max_elevation: float = TerrainConstants.MAX_ELEVATION_M) -> None:
        """Runs the standard preprocessing chain ending in the safety layer."""
        start = time.perf_counter()
        self.add_layer_distance_transform(distance_surface, TerrainLayers.DISTANCE_SURFACE)
        self.add_layer_distance_transform(max_elevation, TerrainLayers.MAX_ELEVATION)
        self.add_layer_horizontal_distance_transform(turn_radius, TerrainLayers.ICS_PLUS,
                                                     TerrainLayers.DISTANCE_SURFACE)
        self.add_layer_horizontal_distance_transform(-turn_radius, TerrainLayers.ICS_MINUS,
                                                     TerrainLayers.MAX_ELEVATION)
        self.add_layer_safety(TerrainLayers.SAFETY, TerrainLayers.ICS_PLUS, TerrainLayers.ICS_MINUS)

        recoverable = np.mean(self._layers[TerrainLayers.SAFETY] >= 0.0) * 100.0
        logger.info(f"Derived terrain layers in {time.perf_counter() - start:.2f}s "
                    f"(turn radius {turn_radius:.1f}m, {recoverable:.1f}% of cells recoverable)")

    def finalize(self) -> "TerrainMap":
        """Marks every layer read-only. Planning queries never write to the map."""
        for data in self._layers.values():
            data.flags.writeable = False
        self._frozen = True
        return self

    def stamp(self, timestamp: Optional[float] = None) -> None:
        self.timestamp = time.time() if timestamp is None else float(timestamp)

    def __repr__(self):
        return (f"TerrainMap(shape={self.shape}, resolution={self.resolution}, origin={self.origin}, "
                f"layers={list(self._layers)}, finalized={self._frozen})")
