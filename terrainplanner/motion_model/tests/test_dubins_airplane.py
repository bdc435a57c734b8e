#!/usr/bin/env python3
# terrainplanner/motion_model/tests/test_dubins_airplane.py

import math
import sys
import unittest
from pathlib import Path

import numpy as np

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from terrainplanner.motion_model import (
    ClimbPolicy, DubinsAirplaneStateSpace, DubinsState, InfeasiblePathError, InvalidModelParameterError
)

def _horizontal_radius(p1, p2, p3) -> float:
    """Circumradius of three planar points; infinite for collinear points."""
    a = math.dist(p1[:2], p2[:2])
    b = math.dist(p2[:2], p3[:2])
    c = math.dist(p1[:2], p3[:2])
    area2 = abs((p2[0] - p1[0]) * (p3[1] - p1[1]) - (p2[1] - p1[1]) * (p3[0] - p1[0]))
    if area2 < 1e-9:
        return math.inf
    return a * b * c / (2.0 * area2)

class TestDubinsAirplaneDistance(unittest.TestCase):
    def setUp(self):
        self.space = DubinsAirplaneStateSpace(turning_radius=66.67, max_climb_angle=0.15)
        rng = np.random.default_rng(7)
        self.pairs = []
        for _ in range(50):
            a = DubinsState(*rng.uniform(-500, 500, 2), rng.uniform(50, 150), rng.uniform(-math.pi, math.pi))
            b = DubinsState(*rng.uniform(-500, 500, 2), rng.uniform(50, 150), rng.uniform(-math.pi, math.pi))
            self.pairs.append((a, b))

    def test_distance_is_non_negative(self):
        for a, b in self.pairs:
            self.assertGreaterEqual(self.space.distance(a, b), 0.0)

    def test_distance_zero_for_identical_states(self):
        state = DubinsState(10.0, -20.0, 100.0, 0.3)
        self.assertEqual(self.space.distance(state, state), 0.0)

    def test_headings_a_full_turn_apart_are_one_state(self):
        a = DubinsState(0.0, 0.0, 100.0, math.pi)
        b = DubinsState(0.0, 0.0, 100.0, -math.pi)
        self.assertEqual(a, b)
        self.assertEqual(self.space.distance(a, b), 0.0)
        self.assertAlmostEqual(DubinsState(0.0, 0.0, 100.0, 0.3 + 2.0 * math.pi).yaw, 0.3)
        self.assertGreater(self.space.distance(a, DubinsState(0.0, 0.0, 100.0, 0.0)), 0.0)

    def test_distance_positive_for_altitude_only_change(self):
        a = DubinsState(0.0, 0.0, 100.0, 0.0)
        b = DubinsState(0.0, 0.0, 150.0, 0.0)
        path = self.space.steer(a, b)
        self.assertGreater(self.space.distance(a, b), 0.0)
        self.assertEqual(path.loiter_turns, 1)
        self.assertEqual(path.end_state, b)

    def test_straight_path_length(self):
        a = DubinsState(0.0, 0.0, 100.0, 0.0)
        b = DubinsState(500.0, 0.0, 100.0, 0.0)
        self.assertAlmostEqual(self.space.distance(a, b), 500.0, places=6)

    def test_distance_is_asymmetric(self):
        a = DubinsState(0.0, 0.0, 100.0, 0.0)
        b = DubinsState(300.0, 200.0, 100.0, 0.5 * math.pi)
        forward = self.space.distance(a, b)
        backward = self.space.distance(b, a)
        # Reversing forces the airframe to turn around first
        self.assertGreater(backward, forward + 1.0)

    def test_invalid_parameters_raise(self):
        with self.assertRaises(InvalidModelParameterError):
            DubinsAirplaneStateSpace(turning_radius=0.0)
        with self.assertRaises(InvalidModelParameterError):
            DubinsAirplaneStateSpace(max_climb_angle=0.0)
        with self.assertRaises(InvalidModelParameterError):
            DubinsAirplaneStateSpace(max_climb_angle=2.0)

class TestDubinsAirplaneInterpolation(unittest.TestCase):
    def setUp(self):
        self.space = DubinsAirplaneStateSpace(turning_radius=80.0, max_climb_angle=0.15)
        self.start = DubinsState(0.0, 0.0, 100.0, 0.0)
        self.goal = DubinsState(300.0, 250.0, 120.0, 0.5 * math.pi)

    def test_endpoints_are_reproduced(self):
        path = self.space.steer(self.start, self.goal)
        self.assertEqual(path.interpolate(0.0), self.start)
        self.assertEqual(path.interpolate(1.0), self.goal)

    def test_interpolation_is_pure(self):
        path = self.space.steer(self.start, self.goal)
        self.assertEqual(path.interpolate(0.37), path.interpolate(0.37))
        self.assertEqual(self.space.interpolate(self.start, self.goal, 0.37), path.interpolate(0.37))

    def test_progress_is_monotonic_and_uniform(self):
        path = self.space.steer(self.start, self.goal)
        fractions = np.linspace(0.0, 1.0, 201)
        points = np.array([path.interpolate(t).position for t in fractions])
        steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
        self.assertTrue(np.all(steps > 0.0))
        np.testing.assert_allclose(steps, path.length / 200.0, rtol=1e-2)

    def test_turn_radius_respected_along_path(self):
        path = self.space.steer(self.start, self.goal)
        states = self.space.sample_path(path, resolution=2.0)
        points = [s.position for s in states]
        for p1, p2, p3 in zip(points, points[1:], points[2:]):
            self.assertGreaterEqual(_horizontal_radius(p1, p2, p3), 80.0 * (1.0 - 1e-3))

    def test_sample_path_includes_both_ends(self):
        path = self.space.steer(self.start, self.goal)
        states = self.space.sample_path(path, resolution=10.0)
        self.assertEqual(len(states), math.ceil(path.length / 10.0) + 1)
        self.assertEqual(states[0], self.start)
        self.assertEqual(states[-1], self.goal)

    def test_zero_length_path_samples_endpoints(self):
        path = self.space.steer(self.start, self.start)
        self.assertEqual(path.length, 0.0)
        self.assertEqual(self.space.sample_path(path, 10.0), [self.start, self.start])

class TestClimbPolicies(unittest.TestCase):
    """Boundary and just-over-boundary cases of the climb limit."""

    GAMMA = 0.15
    RUN = 400.0

    def _pair(self, delta_z: float):
        return DubinsState(0.0, 0.0, 0.0, 0.0), DubinsState(self.RUN, 0.0, delta_z, 0.0)

    def _limit(self) -> float:
        return self.RUN * math.tan(self.GAMMA)

    def test_boundary_climb_is_flown_directly(self):
        for policy in ClimbPolicy:
            space = DubinsAirplaneStateSpace(80.0, self.GAMMA, policy)
            path = space.steer(*self._pair(self._limit()))
            self.assertTrue(path.feasible, policy)
            self.assertTrue(path.reaches_goal, policy)
            self.assertEqual(path.loiter_turns, 0)
            self.assertAlmostEqual(path.climb_angle, self.GAMMA, places=9)

    def test_spiral_adds_loiter_turn_just_over_boundary(self):
        space = DubinsAirplaneStateSpace(80.0, self.GAMMA, ClimbPolicy.SPIRAL)
        start, goal = self._pair(self._limit() + 1.0)
        path = space.steer(start, goal)
        self.assertEqual(path.loiter_turns, 1)
        self.assertLessEqual(path.climb_angle, self.GAMMA)
        self.assertEqual(path.end_state, goal)

    def test_clamp_stops_short_just_over_boundary(self):
        space = DubinsAirplaneStateSpace(80.0, self.GAMMA, ClimbPolicy.CLAMP)
        start, goal = self._pair(self._limit() + 1.0)
        path = space.steer(start, goal)
        self.assertTrue(path.feasible)
        self.assertFalse(path.reaches_goal)
        self.assertAlmostEqual(path.end_state.z, self._limit(), places=6)
        self.assertAlmostEqual(space.distance(start, goal), math.hypot(self.RUN, self._limit() + 1.0), places=6)

    def test_reject_marks_path_infeasible_just_over_boundary(self):
        space = DubinsAirplaneStateSpace(80.0, self.GAMMA, ClimbPolicy.REJECT)
        start, goal = self._pair(self._limit() + 1.0)
        path = space.steer(start, goal)
        self.assertFalse(path.feasible)
        self.assertEqual(space.distance(start, goal), math.inf)
        with self.assertRaises(InfeasiblePathError):
            path.interpolate(0.5)

    def test_descent_is_symmetric_to_climb_limit(self):
        space = DubinsAirplaneStateSpace(80.0, self.GAMMA, ClimbPolicy.REJECT)
        self.assertTrue(space.steer(*self._pair(-self._limit())).feasible)
        self.assertFalse(space.steer(*self._pair(-self._limit() - 1.0)).feasible)

if __name__ == "__main__":
    unittest.main()
