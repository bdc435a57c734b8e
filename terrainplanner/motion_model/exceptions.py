# terrainplanner/motion_model/exceptions.py

from ..exceptions import TerrainPlannerError

class MotionModelError(TerrainPlannerError):
    """Base exception for motion model failures"""
    pass

class InvalidModelParameterError(MotionModelError):
    """Raised when the airframe limits cannot define a state space"""
    def __init__(self, parameter: str, value: float):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid motion model parameter: {parameter}={value}")

class InfeasiblePathError(MotionModelError):
    """Raised when sampling a path that violates the climb limit"""
    pass
