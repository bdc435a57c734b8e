# terrainplanner/config.py
"""
Planner configuration shared by the global planner, the maneuver library and
the replanning driver. Defaults match the fixed-wing airframe and terrain
clearances the planner was tuned for.
"""
import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import ConfigurationError

SELECTION_STRATEGIES = ("best_utility", "random", "weighted")
CLIMB_POLICIES = ("spiral", "clamp", "reject")

@dataclass
class PlannerConfig:
    """Configuration parameters for terrain-aware planning."""
    # Airframe
    turning_radius: float = 66.67
    max_climb_angle: float = 0.15
    climb_policy: str = "spiral"
    cruise_speed: float = 15.0
    min_speed: float = 1.0

    # Terrain clearance
    safety_margin: float = 50.0
    min_altitude: float = 50.0
    max_altitude: float = 120.0
    check_max_altitude: bool = False
    use_safety_layer: bool = False
    validity_resolution: float = 10.0

    # Global planner
    planner_id: str = "rrtstar"
    planner_range: float = 300.0
    goal_bias: float = 0.05
    time_budget: float = 1.0

    # Maneuver library
    planning_horizon: float = 5.0
    primitive_dt: float = 0.1
    primitive_depth: int = 1
    climb_fraction: float = 1.0
    selection_strategy: str = "random"
    selection_temperature: float = 1.0
    random_seed: Optional[int] = None

    # Replanning loops
    lookahead_time: float = 0.4
    command_period: float = 0.1
    status_period: float = 5.0
    pose_history_window: int = 20000
    executed_window: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(", ".join(unknown), message="Unknown configuration keys")
        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "PlannerConfig":
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(str(path), message=f"Could not read configuration file ({e})") from e
        if not isinstance(data, dict):
            raise ConfigurationError(str(path), message="Configuration file must hold a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, path: Union[str, Path]) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def validate(self) -> "PlannerConfig":
        """Raises ConfigurationError on the first inconsistent value."""
        for name in ("turning_radius", "cruise_speed", "min_speed", "validity_resolution", "planner_range",
                     "time_budget", "planning_horizon", "primitive_dt", "command_period", "status_period",
                     "selection_temperature"):
            if not getattr(self, name) > 0:
                raise ConfigurationError(name, getattr(self, name), "Value must be positive")
        if not 0.0 < self.max_climb_angle < 0.5 * math.pi:
            raise ConfigurationError("max_climb_angle", self.max_climb_angle, "Climb angle must lie in (0, pi/2)")
        if self.climb_policy not in CLIMB_POLICIES:
            raise ConfigurationError("climb_policy", self.climb_policy, f"Expected one of {CLIMB_POLICIES}")
        if self.selection_strategy not in SELECTION_STRATEGIES:
            raise ConfigurationError("selection_strategy", self.selection_strategy,
                                     f"Expected one of {SELECTION_STRATEGIES}")
        if self.safety_margin < 0:
            raise ConfigurationError("safety_margin", self.safety_margin, "Value must be non-negative")
        if not 0 <= self.min_altitude < self.max_altitude:
            raise ConfigurationError("min_altitude", self.min_altitude, "Altitude corridor must satisfy 0 <= min < max")
        if not 0.0 <= self.goal_bias <= 1.0:
            raise ConfigurationError("goal_bias", self.goal_bias, "Goal bias must lie in [0, 1]")
        if not 0.0 <= self.climb_fraction <= 1.0:
            raise ConfigurationError("climb_fraction", self.climb_fraction, "Climb fraction must lie in [0, 1]")
        if self.primitive_depth not in (1, 2):
            raise ConfigurationError("primitive_depth", self.primitive_depth, "Primitive depth must be 1 or 2")
        if self.pose_history_window < 1:
            raise ConfigurationError("pose_history_window", self.pose_history_window, "Value must be positive")
        if self.executed_window < 1:
            raise ConfigurationError("executed_window", self.executed_window, "Value must be positive")
        if self.lookahead_time < 0:
            raise ConfigurationError("lookahead_time", self.lookahead_time, "Value must be non-negative")
        return self
