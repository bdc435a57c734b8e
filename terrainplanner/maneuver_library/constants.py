# terrainplanner/maneuver_library/constants.py

GRAVITY_MPS2: float = 9.81

class ManeuverConstants:
    DEFAULT_PLANNING_HORIZON_S: float = 5.0
    DEFAULT_DT_S: float = 0.1

    # Turn rates as multiples of V / R: straight, full-rate and half-rate turns both ways
    YAW_RATE_FACTORS = (0.0, 1.0, -1.0, 0.5, -0.5)
    # Climb rates as multiples of the maximum climb rate: level, climb, descend
    CLIMB_RATE_FACTORS = (0.0, 1.0, -1.0)
