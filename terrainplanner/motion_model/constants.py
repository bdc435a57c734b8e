# terrainplanner/motion_model/constants.py
import math
from enum import Enum, IntEnum

TWO_PI: float = 2.0 * math.pi

class MotionModelConstants:
    # Defaults follow the fixed-wing airframe used by the terrain planner.
    DEFAULT_TURNING_RADIUS_M: float = 66.66667
    DEFAULT_MAX_CLIMB_ANGLE_RAD: float = 0.15

    # Below this the two configurations are treated as co-located.
    DUBINS_EPS: float = 1.0e-9
    # Angles within this of 2*pi are folded back to zero after mod2pi.
    ANGLE_EPS: float = 1.0e-9

    # Fallback sampling resolution for paths, in metres.
    DEFAULT_SAMPLING_RESOLUTION_M: float = 10.0

class DubinsWord(IntEnum):
    LSL = 0  # Left straight left
    LSR = 1  # Left straight right
    RSL = 2  # Right straight left
    RSR = 3  # Right straight right
    RLR = 4  # Right left right
    LRL = 5  # Left right left

    def __str__(self):
        return self.name

class SegmentType(IntEnum):
    LEFT = 0
    STRAIGHT = 1
    RIGHT = 2

SEGMENT_TYPES = {
    DubinsWord.LSL: (SegmentType.LEFT, SegmentType.STRAIGHT, SegmentType.LEFT),
    DubinsWord.LSR: (SegmentType.LEFT, SegmentType.STRAIGHT, SegmentType.RIGHT),
    DubinsWord.RSL: (SegmentType.RIGHT, SegmentType.STRAIGHT, SegmentType.LEFT),
    DubinsWord.RSR: (SegmentType.RIGHT, SegmentType.STRAIGHT, SegmentType.RIGHT),
    DubinsWord.RLR: (SegmentType.RIGHT, SegmentType.LEFT, SegmentType.RIGHT),
    DubinsWord.LRL: (SegmentType.LEFT, SegmentType.RIGHT, SegmentType.LEFT),
}

class ClimbPolicy(str, Enum):
    """How a path handles an altitude change steeper than the climb limit."""
    SPIRAL = "spiral"   # add helical loiter turns until the climb angle fits
    CLAMP = "clamp"     # fly the 2D path at max climb, stop short of the goal altitude
    REJECT = "reject"   # mark the path infeasible
