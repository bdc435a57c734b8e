#!/usr/bin/env python3
# terrainplanner/terrain/tests/test_terrain_map.py

import math
import sys
import tempfile
import unittest
from pathlib import Path

import numpy as np

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from terrainplanner.terrain import (
    LayerNotFoundError, TerrainLayers, TerrainLoadError, TerrainMap, TerrainMapFrozenError
)
from terrainplanner.terrain.utils.synthetic import centered_terrain_map, flat_terrain, flat_top_spike

class TestTerrainMapGeometry(unittest.TestCase):
    def setUp(self):
        x = np.arange(11) * 10.0
        ramp = np.repeat((2.0 * x)[:, None], 11, axis=1)
        self.terrain_map = TerrainMap.from_array(ramp, resolution=10.0, origin=(0.0, 0.0))

    def test_bounds_center_and_length(self):
        self.assertEqual(self.terrain_map.bounds, ((0.0, 0.0), (100.0, 100.0)))
        self.assertEqual(self.terrain_map.center, (50.0, 50.0))
        self.assertEqual(self.terrain_map.length, (100.0, 100.0))

    def test_is_inside(self):
        self.assertTrue(self.terrain_map.is_inside(0.0, 100.0))
        self.assertFalse(self.terrain_map.is_inside(-0.1, 50.0))
        self.assertFalse(self.terrain_map.is_inside(50.0, 100.1))

    def test_bilinear_lookup_is_exact_on_a_ramp(self):
        self.assertAlmostEqual(self.terrain_map.at_position(TerrainLayers.ELEVATION, 12.5, 7.0), 25.0)
        self.assertAlmostEqual(self.terrain_map.at_position(TerrainLayers.ELEVATION, 100.0, 100.0), 200.0)

    def test_lookup_outside_map_is_nan(self):
        self.assertTrue(math.isnan(self.terrain_map.at_position(TerrainLayers.ELEVATION, 150.0, 0.0)))

    def test_vectorised_lookup_matches_scalar(self):
        xs, ys = np.array([12.5, 55.0, 140.0]), np.array([7.0, 99.0, 10.0])
        values = self.terrain_map.sample_layer(TerrainLayers.ELEVATION, xs, ys)
        self.assertAlmostEqual(values[0], 25.0)
        self.assertAlmostEqual(values[1], 110.0)
        self.assertTrue(np.isnan(values[2]))

    def test_missing_layer_raises(self):
        with self.assertRaises(LayerNotFoundError):
            self.terrain_map.at_position(TerrainLayers.SAFETY, 10.0, 10.0)

    def test_rejects_degenerate_grid(self):
        with self.assertRaises(TerrainLoadError):
            TerrainMap.from_array(np.zeros((1, 5)), resolution=10.0)
        with self.assertRaises(TerrainLoadError):
            TerrainMap.from_array(np.zeros((5, 5)), resolution=0.0)

class TestLayerDerivation(unittest.TestCase):
    def test_flat_terrain_layers(self):
        terrain_map = TerrainMap.from_array(flat_terrain(1000.0, 10.0, elevation=200.0), resolution=10.0)
        terrain_map.derive_default_layers(turn_radius=80.0)
        np.testing.assert_allclose(terrain_map.get_layer(TerrainLayers.DISTANCE_SURFACE), 250.0)
        np.testing.assert_allclose(terrain_map.get_layer(TerrainLayers.MAX_ELEVATION), 320.0)
        np.testing.assert_allclose(terrain_map.get_layer(TerrainLayers.SAFETY), 70.0)

    def test_derived_layer_ordering(self):
        elevation = flat_top_spike(1000.0, 10.0, height=300.0, half_width=50.0)
        terrain_map = centered_terrain_map(elevation, 10.0)
        terrain_map.derive_default_layers(turn_radius=80.0)
        distance_surface = terrain_map.get_layer(TerrainLayers.DISTANCE_SURFACE)
        max_elevation = terrain_map.get_layer(TerrainLayers.MAX_ELEVATION)
        self.assertTrue(np.all(distance_surface >= elevation + 50.0 - 1e-9))
        self.assertTrue(np.all(terrain_map.get_layer(TerrainLayers.ICS_PLUS) >= distance_surface))
        self.assertTrue(np.all(terrain_map.get_layer(TerrainLayers.ICS_MINUS) <= max_elevation))
        # Next to the plateau a loiter circle cannot stay below the ceiling and above the surface
        self.assertLess(terrain_map.at_position(TerrainLayers.SAFETY, 100.0, 0.0), 0.0)
        self.assertGreaterEqual(terrain_map.at_position(TerrainLayers.SAFETY, 450.0, 450.0), 0.0)

    def test_distance_transform_spreads_sideways(self):
        elevation = flat_top_spike(400.0, 10.0, height=100.0, half_width=0.0)
        terrain_map = centered_terrain_map(elevation, 10.0)
        terrain_map.add_layer_distance_transform(50.0, TerrainLayers.DISTANCE_SURFACE)
        # 30m beside a 100m peak the 50m sphere reaches 100 + sqrt(50^2 - 30^2)
        self.assertAlmostEqual(terrain_map.at_position(TerrainLayers.DISTANCE_SURFACE, 30.0, 0.0), 140.0)

class TestTerrainMapFinalize(unittest.TestCase):
    def setUp(self):
        self.terrain_map = TerrainMap.from_array(flat_terrain(200.0, 10.0), resolution=10.0)
        self.terrain_map.derive_default_layers(turn_radius=30.0)
        self.terrain_map.finalize()

    def test_layers_are_read_only(self):
        for name in self.terrain_map.layers:
            with self.assertRaises(ValueError):
                self.terrain_map.get_layer(name)[0, 0] = 1.0

    def test_derivation_after_finalize_raises(self):
        with self.assertRaises(TerrainMapFrozenError):
            self.terrain_map.add_layer_distance_transform(10.0, "extra")

    def test_stamp_updates_timestamp(self):
        self.terrain_map.stamp(123.0)
        self.assertEqual(self.terrain_map.timestamp, 123.0)

class TestTerrainMapLoad(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_load_npz_with_metadata_and_color(self):
        path = self.dir / "terrain.npz"
        elevation = flat_terrain(100.0, 5.0, elevation=10.0)
        np.savez(path, elevation=elevation, resolution=5.0, origin=np.array([100.0, 200.0]),
                 color=np.zeros(elevation.shape + (3,)))
        terrain_map = TerrainMap.load(path)
        self.assertEqual(terrain_map.resolution, 5.0)
        self.assertEqual(terrain_map.origin, (100.0, 200.0))
        self.assertIn(TerrainLayers.COLOR, terrain_map.layers)
        self.assertAlmostEqual(terrain_map.at_position(TerrainLayers.ELEVATION, 150.0, 250.0), 10.0)

    def test_load_npy_requires_resolution(self):
        path = self.dir / "terrain.npy"
        np.save(path, flat_terrain(100.0, 5.0))
        with self.assertRaises(TerrainLoadError):
            TerrainMap.load(path)
        self.assertEqual(TerrainMap.load(path, resolution=5.0).shape, (21, 21))

    def test_load_rejects_missing_and_unsupported_files(self):
        with self.assertRaises(TerrainLoadError):
            TerrainMap.load(self.dir / "missing.npy", resolution=5.0)
        path = self.dir / "terrain.tif"
        path.write_bytes(b"not a raster")
        with self.assertRaises(TerrainLoadError):
            TerrainMap.load(path, resolution=5.0)

    def test_color_layer_shape_must_match(self):
        terrain_map = TerrainMap.from_array(flat_terrain(100.0, 5.0), resolution=5.0)
        with self.assertRaises(TerrainLoadError):
            terrain_map.add_color_layer(np.zeros((3, 3)))

if __name__ == "__main__":
    unittest.main()
