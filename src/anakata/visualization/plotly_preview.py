"""
Static plotly figures of render buffers.

Useful for notebooks and for saving a frame to HTML. Batches are placed at
their world positions (scale and offset applied) and merged into one trace
per channel: Mesh3d for cells, Scatter3d lines for edges, Scatter3d markers
for points.
"""

from typing import Iterable

import numpy as np
import plotly.graph_objects as go

from ..config import Channel
from ..tessellation.buffers import RenderBuffer


def _rgb(colors: np.ndarray):
    return [f'rgb({int(r * 255)},{int(g * 255)},{int(b * 255)})' for r, g, b in np.clip(colors, 0, 1)]


def _mesh_trace(buffer: RenderBuffer, opacity: float) -> go.Mesh3d:
    positions, triangles, colors = [], [], []
    base = 0
    for batch in buffer.batches:
        positions.append(batch.world_positions())
        colors.append(batch.colors)
        if batch.indices is not None:
            triangles.append(batch.indices + base)
        base += batch.n_slots
    xyz = np.concatenate(positions) if positions else np.zeros((0, 3))
    ijk = np.concatenate(triangles) if triangles else np.zeros((0, 3), dtype=int)
    return go.Mesh3d(
        x=xyz[:, 0], y=xyz[:, 1], z=xyz[:, 2],
        i=ijk[:, 0], j=ijk[:, 1], k=ijk[:, 2],
        vertexcolor=_rgb(np.concatenate(colors)) if colors else [],
        opacity=opacity,
        flatshading=True,
        name=buffer.channel.value
    )


def _edge_trace(buffer: RenderBuffer) -> go.Scatter3d:
    # None breaks the polyline between consecutive segments
    xs, ys, zs = [], [], []
    for batch in buffer.batches:
        world = batch.world_positions()
        for k in range(0, len(world) - 1, 2):
            for point in (world[k], world[k + 1]):
                xs.append(point[0])
                ys.append(point[1])
                zs.append(point[2])
            xs.append(None)
            ys.append(None)
            zs.append(None)
    return go.Scatter3d(
        x=xs, y=ys, z=zs,
        mode='lines',
        line=dict(color='black', width=2),
        name=buffer.channel.value
    )


def _point_trace(buffer: RenderBuffer, size: float) -> go.Scatter3d:
    world = [batch.world_positions() for batch in buffer.batches]
    colors = [batch.colors for batch in buffer.batches]
    xyz = np.concatenate(world) if world else np.zeros((0, 3))
    return go.Scatter3d(
        x=xyz[:, 0], y=xyz[:, 1], z=xyz[:, 2],
        mode='markers',
        marker=dict(size=size, color=_rgb(np.concatenate(colors)) if colors else []),
        name=buffer.channel.value
    )


def buffer_trace(buffer: RenderBuffer, opacity: float = 0.8, point_size: float = 4):
    """One plotly trace for a whole buffer."""
    channel = Channel(buffer.channel)
    if channel == Channel.CELLS:
        return _mesh_trace(buffer, opacity)
    if channel == Channel.EDGES:
        return _edge_trace(buffer)
    return _point_trace(buffer, point_size)


def buffers_figure(buffers: Iterable[RenderBuffer],
                   title: str = '',
                   width: int = 800,
                   height: int = 600) -> go.Figure:
    """Figure with one trace per buffer.

    Args:
        buffers: Buffers to draw, typically the values of ``derive_all``
        title: Figure title
        width: Figure width in pixels
        height: Figure height in pixels

    Returns:
        Plotly figure object
    """
    fig = go.Figure()
    for buffer in buffers:
        fig.add_trace(buffer_trace(buffer))

    fig.update_layout(
        title=title,
        scene=dict(
            xaxis_title='X',
            yaxis_title='Y',
            zaxis_title='Z',
            aspectmode='data'
        ),
        width=width,
        height=height
    )
    return fig
