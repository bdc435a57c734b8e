#!/usr/bin/env python3
# terrainplanner/terrain/tests/test_validity_checker.py

import math
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from terrainplanner.config import PlannerConfig
from terrainplanner.exceptions import ConfigurationError
from terrainplanner.motion_model import ClimbPolicy, DubinsAirplaneStateSpace, DubinsState
from terrainplanner.terrain import LayerNotFoundError, TerrainValidityChecker
from terrainplanner.terrain.validity_checker import densify_polyline
from terrainplanner.terrain.utils.synthetic import centered_terrain_map, flat_terrain, flat_top_spike

class TestPositionValidity(unittest.TestCase):
    def setUp(self):
        self.terrain_map = centered_terrain_map(flat_terrain(1000.0, 10.0, elevation=100.0), 10.0)
        self.checker = TerrainValidityChecker(self.terrain_map, safety_margin=50.0)

    def test_clearance_above_margin_is_valid(self):
        self.assertTrue(self.checker.is_valid((0.0, 0.0, 160.0)))
        self.assertTrue(self.checker.is_valid((0.0, 0.0, 150.0)))
        self.assertFalse(self.checker.is_valid((0.0, 0.0, 149.9)))

    def test_outside_map_is_invalid_without_raising(self):
        self.assertFalse(self.checker.is_valid((600.0, 0.0, 500.0)))
        self.assertEqual(self.checker.clearance((600.0, 0.0, 500.0)), -math.inf)
        self.assertAlmostEqual(self.checker.clearance((10.0, 10.0, 175.0)), 75.0)

    def test_state_validity_uses_position(self):
        self.assertTrue(self.checker.is_state_valid(DubinsState(0.0, 0.0, 200.0, 1.0)))
        self.assertFalse(self.checker.is_state_valid(DubinsState(0.0, 0.0, 120.0, 1.0)))

    def test_ceiling_check_relative_to_terrain(self):
        checker = TerrainValidityChecker(self.terrain_map, safety_margin=50.0, check_max_altitude=True,
                                         max_altitude=120.0)
        self.assertTrue(checker.is_valid((0.0, 0.0, 220.0)))
        self.assertFalse(checker.is_valid((0.0, 0.0, 230.0)))

    def test_ceiling_check_uses_max_elevation_layer(self):
        self.terrain_map.derive_default_layers(turn_radius=80.0)
        checker = TerrainValidityChecker(self.terrain_map, safety_margin=50.0, check_max_altitude=True)
        self.assertTrue(checker.is_valid((0.0, 0.0, 219.0)))
        self.assertFalse(checker.is_valid((0.0, 0.0, 221.0)))

    def test_ceiling_check_without_ceiling_raises(self):
        with self.assertRaises(ConfigurationError):
            TerrainValidityChecker(self.terrain_map, check_max_altitude=True)

    def test_safety_layer_required_when_enabled(self):
        with self.assertRaises(LayerNotFoundError):
            TerrainValidityChecker(self.terrain_map, use_safety_layer=True)

    def test_negative_margin_raises(self):
        with self.assertRaises(ConfigurationError):
            TerrainValidityChecker(self.terrain_map, safety_margin=-1.0)

    def test_trajectory_validity(self):
        trajectory = MagicMock()
        trajectory.position.return_value = np.array([[0.0, 0.0, 200.0], [10.0, 0.0, 200.0]])
        self.assertTrue(self.checker.is_trajectory_valid(trajectory))
        trajectory.position.return_value = np.array([[0.0, 0.0, 200.0], [10.0, 0.0, 120.0]])
        self.assertFalse(self.checker.is_trajectory_valid(trajectory))
        trajectory.position.return_value = np.empty((0, 3))
        self.assertFalse(self.checker.is_trajectory_valid(trajectory))

    def test_non_finite_position_is_invalid(self):
        for position in ((0.0, 0.0, math.nan), (math.nan, 0.0, 200.0), (0.0, math.inf, 200.0), (0.0, 0.0, math.inf)):
            with self.subTest(position=position):
                self.assertFalse(self.checker.is_valid(position))
                self.assertEqual(self.checker.clearance(position), -math.inf)

    def test_trajectory_with_non_finite_state_is_invalid(self):
        trajectory = MagicMock()
        trajectory.position.return_value = np.array([[0.0, 0.0, 200.0], [10.0, 0.0, math.nan]])
        self.assertFalse(self.checker.is_trajectory_valid(trajectory, resolution=2.0))
        self.assertFalse(self.checker.is_trajectory_valid(trajectory))

    def test_densify_keeps_non_finite_segments(self):
        positions = np.array([[0.0, 0.0, 200.0], [0.0, 0.0, math.nan], [10.0, 0.0, 200.0]])
        self.assertEqual(densify_polyline(positions, 1.0).shape, (3, 3))

    def test_from_config_prefers_max_elevation_layer(self):
        config = PlannerConfig(safety_margin=50.0, check_max_altitude=True, max_altitude=300.0)
        checker = TerrainValidityChecker.from_config(self.terrain_map, config)
        self.assertEqual(checker.max_altitude, 300.0)
        self.assertTrue(checker.is_valid((0.0, 0.0, 390.0)))

        self.terrain_map.derive_default_layers(turn_radius=80.0)
        checker = TerrainValidityChecker.from_config(self.terrain_map, config, max_altitude=500.0)
        self.assertIsNone(checker.max_altitude)
        self.assertFalse(checker.is_valid((0.0, 0.0, 390.0)))

class TestMotionValidity(unittest.TestCase):
    def setUp(self):
        # 200m high square plateau at the map centre
        elevation = flat_top_spike(1000.0, 10.0, height=200.0, half_width=60.0)
        self.terrain_map = centered_terrain_map(elevation, 10.0)
        self.checker = TerrainValidityChecker(self.terrain_map, safety_margin=50.0)
        self.space = DubinsAirplaneStateSpace(turning_radius=80.0, max_climb_angle=0.15)

    def test_motion_over_obstacle_is_invalid(self):
        start = DubinsState(-400.0, 0.0, 100.0, 0.0)
        goal = DubinsState(400.0, 0.0, 100.0, 0.0)
        self.assertTrue(self.checker.is_state_valid(start))
        self.assertTrue(self.checker.is_state_valid(goal))
        self.assertFalse(self.checker.is_motion_valid(self.space, start, goal, resolution=10.0))

    def test_motion_beside_obstacle_is_valid(self):
        start = DubinsState(-400.0, 300.0, 100.0, 0.0)
        goal = DubinsState(400.0, 300.0, 100.0, 0.0)
        self.assertTrue(self.checker.is_motion_valid(self.space, start, goal, resolution=10.0))

    def test_infeasible_climb_is_invalid(self):
        space = DubinsAirplaneStateSpace(turning_radius=80.0, max_climb_angle=0.15, climb_policy=ClimbPolicy.REJECT)
        start = DubinsState(-400.0, 300.0, 100.0, 0.0)
        goal = DubinsState(-300.0, 300.0, 300.0, 0.0)
        self.assertFalse(self.checker.is_motion_valid(space, start, goal, resolution=10.0))

    def test_sparse_trajectory_is_densified(self):
        trajectory = MagicMock()
        trajectory.position.return_value = np.array([[-400.0, 0.0, 100.0], [400.0, 0.0, 100.0]])
        self.assertTrue(self.checker.is_trajectory_valid(trajectory))
        self.assertFalse(self.checker.is_trajectory_valid(trajectory, resolution=10.0))

    def test_loiter_circle_validity(self):
        self.assertTrue(self.checker.is_loiter_circle_valid((-300.0, -300.0, 100.0), 80.0))
        self.assertFalse(self.checker.is_loiter_circle_valid((-130.0, 0.0, 100.0), 80.0))
        self.assertFalse(self.checker.is_loiter_circle_valid((-460.0, 0.0, 100.0), 80.0))

if __name__ == "__main__":
    unittest.main()
