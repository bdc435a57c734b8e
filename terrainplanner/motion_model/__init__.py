# terrainplanner/motion_model/__init__.py
"""
Dubins airplane motion model: kinematic state space, steering and
interpolation for a fixed-wing airframe with a minimum turning radius and a
bounded climb angle.
"""
from .core import DubinsAirplaneStateSpace
from .constants import ClimbPolicy, DubinsWord
from .data_models import DubinsState, DubinsAirplanePath
from .exceptions import MotionModelError, InvalidModelParameterError, InfeasiblePathError
from .utils.dubins import wrap_pi

__all__ = [
    "DubinsAirplaneStateSpace",
    "DubinsState",
    "DubinsAirplanePath",
    "ClimbPolicy",
    "DubinsWord",
    "MotionModelError",
    "InvalidModelParameterError",
    "InfeasiblePathError",
    "wrap_pi",
]
