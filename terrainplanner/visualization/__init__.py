# terrainplanner/visualization/__init__.py
from .plotter import PlanVisualizer

__all__ = ['PlanVisualizer']
