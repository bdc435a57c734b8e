# terrainplanner/maneuver_library/utils/kinematics.py
import math
from typing import Tuple

from ..constants import GRAVITY_MPS2

def euler_to_quaternion(roll: float, pitch: float, yaw: float) -> Tuple[float, float, float, float]:
    """ZYX Euler angles (radians) to a unit quaternion (w, x, y, z)."""
    cr, sr = math.cos(0.5 * roll), math.sin(0.5 * roll)
    cp, sp = math.cos(0.5 * pitch), math.sin(0.5 * pitch)
    cy, sy = math.cos(0.5 * yaw), math.sin(0.5 * yaw)
    return (cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy)

def coordinated_turn_attitude(speed: float, yaw_rate: float, climb_rate: float,
                              yaw: float) -> Tuple[float, float, float, float]:
    """Attitude of a coordinated turn: bank from the centripetal load, pitch along the flight path."""
    roll = math.atan2(speed * yaw_rate, GRAVITY_MPS2)
    pitch = math.atan2(climb_rate, speed) if speed > 0.0 else 0.0
    return euler_to_quaternion(roll, pitch, yaw)
