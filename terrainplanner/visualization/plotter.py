# terrainplanner/visualization/plotter.py
"""
Contains the PlanVisualizer class for interactive 3D views of a terrain map,
a global plan, its search tree and the maneuver candidates of a cycle.
"""
import logging
from typing import List, Optional

import numpy as np
import plotly.graph_objects as go

from ..maneuver_library import Trajectory
from ..path_planner import PlannerData
from ..terrain import TerrainLayers, TerrainMap

class PlanVisualizer:
    """Builds plotly figures from planner outputs. Every overlay is optional."""

    def __init__(self, colorscale: str = "Earth", max_tree_edges: int = 2000):
        self.colorscale = colorscale
        self.max_tree_edges = max_tree_edges

    def _terrain_surface(self, terrain_map: TerrainMap, layer: str) -> go.Surface:
        x_min, y_min = terrain_map.origin
        nx, ny = terrain_map.shape
        xs = x_min + np.arange(nx) * terrain_map.resolution
        ys = y_min + np.arange(ny) * terrain_map.resolution
        # Surface z is indexed [y][x]
        return go.Surface(x=xs, y=ys, z=terrain_map.get_layer(layer).T, colorscale=self.colorscale,
                          showscale=False, opacity=0.9, name=layer)

    def _tree_trace(self, planner_data: PlannerData) -> go.Scatter3d:
        xs, ys, zs = [], [], []
        for parent, child in planner_data.edges[:self.max_tree_edges]:
            for index in (parent, child):
                x, y, z = planner_data.vertices[index, :3]
                xs.append(x); ys.append(y); zs.append(z)
            xs.append(None); ys.append(None); zs.append(None)
        return go.Scatter3d(x=xs, y=ys, z=zs, mode='lines', line=dict(width=1, color='lightgray'),
                            name=f'Search tree ({planner_data.num_vertices} vertices)')

    def create_3d_plot(self, terrain_map: TerrainMap, path: Optional[np.ndarray] = None,
                       planner_data: Optional[PlannerData] = None,
                       candidates: Optional[List[Trajectory]] = None,
                       selected: Optional[Trajectory] = None,
                       pose_history: Optional[np.ndarray] = None,
                       layer: str = TerrainLayers.ELEVATION) -> go.Figure:
        fig = go.Figure()
        fig.add_trace(self._terrain_surface(terrain_map, layer))

        if planner_data is not None and planner_data.num_edges > 0:
            fig.add_trace(self._tree_trace(planner_data))

        for i, candidate in enumerate(candidates or []):
            positions = candidate.position()
            color = 'royalblue' if candidate.validity else 'crimson'
            fig.add_trace(go.Scatter3d(x=positions[:, 0], y=positions[:, 1], z=positions[:, 2], mode='lines',
                                       line=dict(width=2, color=color), opacity=0.6, showlegend=(i == 0),
                                       legendgroup='candidates', name='Candidate maneuvers'))

        if selected is not None and len(selected) > 0:
            positions = selected.position()
            fig.add_trace(go.Scatter3d(x=positions[:, 0], y=positions[:, 1], z=positions[:, 2], mode='lines',
                                       line=dict(width=6, color='gold'), name='Reference maneuver'))

        if path is not None and len(path) > 0:
            fig.add_trace(go.Scatter3d(x=path[:, 0], y=path[:, 1], z=path[:, 2], mode='lines',
                                       line=dict(width=5, color='blue'), name='Planned path'))
            fig.add_trace(go.Scatter3d(x=[path[0, 0]], y=[path[0, 1]], z=[path[0, 2]], mode='markers',
                                       marker=dict(size=6, color='green'), name='Start'))
            fig.add_trace(go.Scatter3d(x=[path[-1, 0]], y=[path[-1, 1]], z=[path[-1, 2]], mode='markers',
                                       marker=dict(size=6, color='red', symbol='cross'), name='Goal'))

        if pose_history is not None and len(pose_history) > 0:
            fig.add_trace(go.Scatter3d(x=pose_history[:, 0], y=pose_history[:, 1], z=pose_history[:, 2],
                                       mode='lines', line=dict(width=3, color='black', dash='dot'),
                                       name='Vehicle track'))

        fig.update_layout(title='Terrain-Aware Flight Plan',
                          scene=dict(xaxis_title='East (m)', yaxis_title='North (m)', zaxis_title='Altitude (m)',
                                     aspectmode='data'),
                          margin=dict(r=20, l=10, b=10, t=40))
        return fig

    def save_3d_plot(self, fig: go.Figure, filename: str) -> None:
        fig.write_html(filename)
        logging.info(f"-> Interactive 3D plot generated: '{filename}'.")
