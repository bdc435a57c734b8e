# terrainplanner/replanning/core.py
"""
Fixed-period replanning driver.

A planning cycle re-anchors the maneuver library at the state the vehicle is
projected to reach after the lookahead time, and swaps in the selected
primitive as the new reference. A faster command cycle samples the reference
at the current time and publishes it as a position setpoint. When a planning
cycle finds no valid candidate the previous reference stays in place and the
cycle is reported as degraded.
"""
import logging
import threading
import time
from collections import deque
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..config import PlannerConfig
from ..maneuver_library import ManeuverLibrary, State, Trajectory, TrajectorySegments
from ..terrain import TerrainMap
from .data_models import CycleReport, ReferenceTrajectory, VehicleStateEstimate

logger = logging.getLogger(__name__)

class TerrainPlanner:
    """
    Owns the vehicle state estimate, the maneuver library and the current
    reference trajectory. Consumers subscribe through the on_* callbacks,
    which are plain attributes and may be left as None.
    """
    def __init__(self, terrain_map: TerrainMap, config: Optional[PlannerConfig] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or PlannerConfig()
        self.clock = clock
        self.terrain_map = terrain_map
        if not terrain_map.is_finalized:
            # Shared read-only by the command and status loops
            logger.info("Finalizing terrain map for replanning")
            terrain_map.finalize()
        self.maneuver_library = ManeuverLibrary(terrain_map, self.config)

        self._state_lock = threading.Lock()
        self._reference_lock = threading.Lock()
        self._position: Optional[np.ndarray] = None
        self._velocity = np.zeros(3)
        self._attitude = (1.0, 0.0, 0.0, 0.0)
        self._state_time = 0.0
        self.pose_history = deque(maxlen=self.config.pose_history_window)

        self.reference: Optional[ReferenceTrajectory] = None
        self.executed = TrajectorySegments()
        self.last_report: Optional[CycleReport] = None

        self.on_setpoint: Optional[Callable[[State], None]] = None
        self.on_vehicle_pose: Optional[Callable[[VehicleStateEstimate], None]] = None
        self.on_pose_history: Optional[Callable[[np.ndarray], None]] = None
        self.on_reference: Optional[Callable[[ReferenceTrajectory], None]] = None
        self.on_candidates: Optional[Callable[[List[Trajectory]], None]] = None
        self.on_map: Optional[Callable[[TerrainMap], None]] = None

        self._stop_event = threading.Event()
        self._threads: List[threading.Thread] = []

    # --- State estimate input ---

    def update_pose(self, position: Sequence[float], attitude: Optional[Sequence[float]] = None,
                    timestamp: Optional[float] = None) -> None:
        position = np.asarray(position, dtype=float)
        with self._state_lock:
            self._position = position
            if attitude is not None:
                self._attitude = tuple(float(a) for a in attitude)
            self._state_time = self.clock() if timestamp is None else timestamp
            self.pose_history.append(position)

    def update_twist(self, velocity: Sequence[float]) -> None:
        with self._state_lock:
            self._velocity = np.asarray(velocity, dtype=float)

    def vehicle_state(self) -> Optional[VehicleStateEstimate]:
        """Consistent snapshot of the latest estimate, or None before the first pose."""
        with self._state_lock:
            if self._position is None:
                return None
            return VehicleStateEstimate(position=tuple(self._position), velocity=tuple(self._velocity),
                                        attitude=self._attitude, timestamp=self._state_time)

    def get_pose_history(self) -> np.ndarray:
        with self._state_lock:
            if not self.pose_history:
                return np.empty((0, 3))
            return np.array(self.pose_history)

    # --- Planning cycle ---

    def run_planning_cycle(self, now: Optional[float] = None) -> CycleReport:
        """
        Plans one receding-horizon step. A degraded cycle leaves the reference
        trajectory untouched.
        """
        start_time = time.perf_counter()
        now = self.clock() if now is None else now
        estimate = self.vehicle_state()
        if estimate is None:
            logger.warning("Planning cycle skipped: no vehicle pose received yet")
            return self._finish_cycle(CycleReport(timestamp=now, degraded=True, reason="no pose"), start_time)

        position = np.asarray(estimate.position)
        velocity = np.asarray(estimate.velocity)
        anchor = position + velocity * self.config.lookahead_time
        if not np.all(np.isfinite(anchor)):
            logger.warning(f"Degraded planning cycle at t={now:.2f}: non-finite state estimate "
                           f"(position {estimate.position}, velocity {estimate.velocity})")
            return self._finish_cycle(CycleReport(timestamp=now, degraded=True, reason="non-finite state"),
                                      start_time)

        library = self.maneuver_library
        candidates = library.generate_motion_primitives(anchor, velocity)
        solved = library.solve()
        selected = library.select_primitive() if solved else None
        report = CycleReport(timestamp=now, degraded=selected is None, num_candidates=len(candidates),
                             num_valid=len(library.get_valid_primitives()), anchor=tuple(anchor),
                             selected=selected)

        if self.on_candidates:
            self.on_candidates(candidates)

        if selected is None:
            report.reason = "no valid candidate"
            logger.warning(f"Degraded planning cycle at t={now:.2f}: none of {len(candidates)} candidates valid, "
                           f"keeping previous reference")
            return self._finish_cycle(report, start_time)

        reference = ReferenceTrajectory(trajectory=selected, plan_time=now)
        with self._reference_lock:
            self.reference = reference
            self.executed.append_segment(selected)
            self.executed.trim_segments(self.config.executed_window)
            self.executed.update_validity()
        if self.on_reference:
            self.on_reference(reference)
        return self._finish_cycle(report, start_time)

    def _finish_cycle(self, report: CycleReport, start_time: float) -> CycleReport:
        report.duration = time.perf_counter() - start_time
        self.last_report = report
        logger.debug(f"Planning cycle: {report.num_valid}/{report.num_candidates} valid, "
                     f"degraded={report.degraded}, {report.duration * 1000.0:.1f} ms")
        return report

    # --- Command cycle ---

    def current_setpoint(self, now: Optional[float] = None) -> Optional[State]:
        """Reference state for the given time, or None before the first successful cycle."""
        now = self.clock() if now is None else now
        with self._reference_lock:
            reference = self.reference
        if reference is None:
            return None
        return reference.setpoint_at(now)

    def run_command_cycle(self, now: Optional[float] = None) -> Optional[State]:
        setpoint = self.current_setpoint(now)
        if setpoint is not None and self.on_setpoint:
            self.on_setpoint(setpoint)
        estimate = self.vehicle_state()
        if estimate is not None and self.on_vehicle_pose:
            self.on_vehicle_pose(estimate)
        if self.on_pose_history:
            self.on_pose_history(self.get_pose_history())
        return setpoint

    def run_status_cycle(self, now: Optional[float] = None) -> CycleReport:
        """Planning cycle followed by a map republish, as run by the status loop."""
        report = self.run_planning_cycle(now)
        self.publish_map()
        return report

    def publish_map(self) -> None:
        self.terrain_map.stamp()
        if self.on_map:
            self.on_map(self.terrain_map)

    # --- Threads ---

    def _worker(self, name: str, period: float, step: Callable[[], object]) -> None:
        while not self._stop_event.is_set():
            try:
                step()
            except Exception as e:
                logger.error(f"{name} cycle failed: {e}", exc_info=True)
            self._stop_event.wait(period)

    def start(self) -> None:
        """Runs the command and status cycles on daemon threads until stop()."""
        if self.is_running:
            logger.warning("TerrainPlanner already running")
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(target=self._worker, args=("Command", self.config.command_period, self.run_command_cycle),
                             name="CommandLoop", daemon=True),
            threading.Thread(target=self._worker, args=("Status", self.config.status_period, self.run_status_cycle),
                             name="StatusLoop", daemon=True),
        ]
        for thread in self._threads:
            thread.start()
        logging.info(f"TerrainPlanner started: command period {self.config.command_period}s, "
                     f"status period {self.config.status_period}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
        logging.info("TerrainPlanner stopped")

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)
