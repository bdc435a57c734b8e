#!/usr/bin/env python3
# terrainplanner/visualization/tests/test_plotter.py

import sys
import tempfile
import unittest
from pathlib import Path

import numpy as np

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from terrainplanner.maneuver_library import State, Trajectory
from terrainplanner.path_planner import PlannerData
from terrainplanner.terrain.utils.synthetic import centered_terrain_map, gaussian_hills
from terrainplanner.visualization import PlanVisualizer

class TestPlanVisualizer(unittest.TestCase):
    def setUp(self):
        elevation = gaussian_hills(400.0, 20.0, [(0.0, 0.0, 100.0, 80.0)])
        self.terrain_map = centered_terrain_map(elevation, 20.0)
        self.visualizer = PlanVisualizer()

    def test_terrain_only(self):
        fig = self.visualizer.create_3d_plot(self.terrain_map)
        self.assertEqual(len(fig.data), 1)
        surface = fig.data[0]
        self.assertEqual(surface.type, 'surface')
        self.assertAlmostEqual(surface.x[0], -200.0)
        self.assertAlmostEqual(surface.y[-1], 200.0)

    def test_overlays(self):
        path = np.array([[-150.0, 0.0, 200.0], [0.0, 50.0, 220.0], [150.0, 0.0, 200.0]])
        planner_data = PlannerData(vertices=np.array([[-150.0, 0.0, 200.0, 0.0], [0.0, 50.0, 220.0, 0.0]]),
                                   edges=[(0, 1)], start_indices=[0], goal_indices=[1])
        states = [State(position=(float(i), 0.0, 200.0), velocity=(10.0, 0.0, 0.0)) for i in range(3)]
        candidates = [Trajectory(states=states, validity=True), Trajectory(states=states, validity=False)]

        fig = self.visualizer.create_3d_plot(self.terrain_map, path=path, planner_data=planner_data,
                                             candidates=candidates, selected=candidates[0],
                                             pose_history=path)
        names = [trace.name for trace in fig.data]
        self.assertIn('Planned path', names)
        self.assertIn('Reference maneuver', names)
        self.assertIn('Vehicle track', names)
        self.assertEqual(names.count('Candidate maneuvers'), 2)

    def test_save_html(self):
        fig = self.visualizer.create_3d_plot(self.terrain_map)
        with tempfile.TemporaryDirectory() as tmp:
            filename = str(Path(tmp) / "plan.html")
            self.visualizer.save_3d_plot(fig, filename)
            self.assertTrue(Path(filename).is_file())

if __name__ == "__main__":
    unittest.main()
