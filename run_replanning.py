# run_replanning.py
import os
import sys
import logging

# --- Setup Python Path ---
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from terrainplanner.config import PlannerConfig
from terrainplanner.maneuver_library import terrain_clearance_utility
from terrainplanner.replanning import TerrainPlanner
from terrainplanner.terrain.utils.synthetic import centered_terrain_map, random_ridges
from terrainplanner.visualization import PlanVisualizer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

class SimulatedClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

def main():
    """
    Flies a simulated vehicle that tracks the published setpoints perfectly,
    replanning on a fixed period, and writes the flown track to an HTML view.
    Usage: run_replanning.py [config.json]
    """
    # --- Configuration ---
    config = PlannerConfig.from_json(sys.argv[1]) if len(sys.argv) > 1 else PlannerConfig(random_seed=2)
    simulation_time = 120.0
    terrain_map = centered_terrain_map(random_ridges(4000.0, 20.0, amplitude=200.0, seed=2), 20.0)
    output_file = os.path.join(project_root, "replanning_track.html")

    clock = SimulatedClock()
    planner = TerrainPlanner(terrain_map, config, clock=clock)
    planner.maneuver_library.set_utility_function(terrain_clearance_utility(terrain_map))
    last_candidates = []

    def keep_candidates(candidates):
        last_candidates[:] = candidates
    planner.on_candidates = keep_candidates

    planner.update_pose((0.0, 0.0, 350.0))
    planner.update_twist((config.cruise_speed, 0.0, 0.0))
    planner.publish_map()

    # --- Simulation loop ---
    steps_per_plan = max(1, int(round(config.status_period / config.command_period)))
    planning_cycles, degraded_cycles, step = 0, 0, 0
    while clock.now < simulation_time:
        if step % steps_per_plan == 0:
            report = planner.run_planning_cycle()
            planning_cycles += 1
            degraded_cycles += report.degraded
        setpoint = planner.run_command_cycle()
        if setpoint is None:
            logging.error("No reference trajectory available. Aborting simulation.")
            break
        planner.update_pose(setpoint.position, setpoint.attitude)
        planner.update_twist(setpoint.velocity)
        clock.now += config.command_period
        step += 1

    track = planner.get_pose_history()
    logging.info(f"Simulated {clock.now:.1f} s: {planning_cycles - degraded_cycles} maneuvers flown, "
                 f"{degraded_cycles} degraded cycles")

    visualizer = PlanVisualizer()
    fig = visualizer.create_3d_plot(terrain_map, candidates=last_candidates,
                                    selected=planner.reference.trajectory if planner.reference else None,
                                    pose_history=track)
    visualizer.save_3d_plot(fig, output_file)

if __name__ == "__main__":
    main()
