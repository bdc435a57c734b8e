# terrainplanner/exceptions.py
"""
Root of the exception hierarchy. Each subpackage derives its own errors from
TerrainPlannerError so callers can catch planner failures as a family.
"""

class TerrainPlannerError(Exception):
    """Base class for all terrain planner errors"""
    pass

class ConfigurationError(TerrainPlannerError):
    """Invalid planner configuration detected"""
    def __init__(self, config_name, value=None, message="Configuration error"):
        self.config_name = config_name
        self.value = value
        detail = f"{config_name}={value!r}" if value is not None else config_name
        super().__init__(f"{message}: {detail}")
