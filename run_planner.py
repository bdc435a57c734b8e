# run_planner.py
import os
import sys
import logging

# --- Setup Python Path ---
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from terrainplanner.config import PlannerConfig
from terrainplanner.motion_model import ClimbPolicy, DubinsAirplaneStateSpace
from terrainplanner.path_planner import TerrainRrtPlanner
from terrainplanner.terrain import TerrainMap
from terrainplanner.terrain.utils.synthetic import centered_terrain_map, gaussian_hills
from terrainplanner.visualization import PlanVisualizer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

MAX_SOLVE_ATTEMPTS = 10

def load_terrain(path: str = None) -> TerrainMap:
    if path:
        return TerrainMap.load(path)
    hills = [(-300.0, 200.0, 250.0, 250.0), (400.0, -300.0, 300.0, 200.0), (0.0, 0.0, 180.0, 150.0)]
    return centered_terrain_map(gaussian_hills(3000.0, 20.0, hills), 20.0)

def main():
    """
    Plans a single start-to-goal path over terrain and writes an interactive
    3D view of the result. Usage: run_planner.py [config.json] [terrain.npz]
    """
    # --- Configuration ---
    config = PlannerConfig.from_json(sys.argv[1]) if len(sys.argv) > 1 else PlannerConfig(random_seed=1)
    terrain_map = load_terrain(sys.argv[2] if len(sys.argv) > 2 else None)
    start_pos, start_vel = (-1000.0, -1000.0, 350.0), (15.0, 0.0, 0.0)
    goal_pos, goal_vel = (1000.0, 1000.0, 350.0), (0.0, 15.0, 0.0)
    output_file = os.path.join(project_root, "terrain_plan.html")

    # --- Step 1: Terrain layers ---
    logging.info(f"Step 1: Deriving safety layers for {terrain_map}")
    terrain_map.derive_default_layers(config.turning_radius, config.min_altitude, config.max_altitude)
    terrain_map.finalize()

    # --- Step 2: Planning ---
    logging.info(f"Step 2: Planning with '{config.planner_id}'...")
    space = DubinsAirplaneStateSpace(config.turning_radius, config.max_climb_angle, ClimbPolicy(config.climb_policy))
    planner = TerrainRrtPlanner(space, config)
    planner.set_map(terrain_map)
    planner.set_altitude_limits(config.max_altitude, config.min_altitude)
    planner.set_bounds_from_map()
    planner.setup_problem(start_pos, start_vel, goal_pos, goal_vel)

    found = False
    for attempt in range(MAX_SOLVE_ATTEMPTS):
        if planner.solve(config.time_budget):
            found = True
            break
        logging.info(f"  Attempt {attempt + 1}/{MAX_SOLVE_ATTEMPTS}: no solution yet ({planner.status.name})")
    if not found:
        logging.error("No path found. Try a larger time budget or a different planner.")
        return

    path = planner.get_solution_path(config.validity_resolution)
    logging.info(f"Path found: {planner.get_solution_path_length():.1f} m, {len(path)} samples, "
                 f"{planner.total_solve_time:.2f} s of planning")

    # --- Step 3: Visualization ---
    visualizer = PlanVisualizer()
    fig = visualizer.create_3d_plot(terrain_map, path=path, planner_data=planner.get_planner_data())
    visualizer.save_3d_plot(fig, output_file)

if __name__ == "__main__":
    main()
