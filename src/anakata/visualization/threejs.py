"""
pythreejs preview of render buffers.

Each RenderBatch becomes one three.js object whose ``position`` is the batch
offset and whose ``scale`` is the batch scale, so the buffer is uploaded
exactly as the kernel produced it:
- cells channel: indexed Mesh with per-vertex colors
- edges channel: LineSegments over consecutive endpoint pairs
- points channel: Points

The objects of one buffer are gathered in a Group. ``update_group`` pushes new
positions into an existing group after ``Tessellator.update`` so the widget
tree is not rebuilt every frame. Nothing here runs a render loop.
"""

import logging
from typing import Optional

import numpy as np
import pythreejs as p3js

from ..config import Channel
from ..tessellation.buffers import RenderBatch, RenderBuffer

logger = logging.getLogger(__name__)


def _geometry(batch: RenderBatch) -> p3js.BufferGeometry:
    attributes = {
        'position': p3js.BufferAttribute(
            np.asarray(batch.positions, dtype=np.float32),
            normalized=False
        ),
        'color': p3js.BufferAttribute(
            np.asarray(batch.colors, dtype=np.float32),
            normalized=False
        ),
    }
    if batch.indices is not None:
        return p3js.BufferGeometry(
            index=p3js.BufferAttribute(np.asarray(batch.indices, dtype=np.uint32).ravel(), normalized=False),
            attributes=attributes
        )
    return p3js.BufferGeometry(attributes=attributes)


def batch_object(batch: RenderBatch,
                 channel: Channel,
                 opacity: float = 0.8,
                 point_size: float = 0.05) -> p3js.Object3D:
    """Build the three.js object for one batch.

    Args:
        batch: Batch to upload
        channel: Channel the batch belongs to
        opacity: Opacity of filled cells
        point_size: Size of point sprites

    Returns:
        Mesh, LineSegments or Points placed at the batch offset
    """
    geometry = _geometry(batch)
    channel = Channel(channel)

    if channel == Channel.CELLS:
        material = p3js.MeshBasicMaterial(
            vertexColors='VertexColors',
            transparent=opacity < 1.0,
            opacity=opacity,
            side='DoubleSide'
        )
        obj = p3js.Mesh(geometry, material)
    elif channel == Channel.EDGES:
        material = p3js.LineBasicMaterial(vertexColors='VertexColors', linewidth=2)
        obj = p3js.LineSegments(geometry, material)
    else:
        material = p3js.PointsMaterial(vertexColors='VertexColors', size=point_size)
        obj = p3js.Points(geometry, material)

    obj.position = tuple(float(c) for c in batch.offset)
    obj.scale = (batch.scale, batch.scale, batch.scale)
    return obj


def buffer_group(buffer: RenderBuffer, opacity: float = 0.8, point_size: float = 0.05) -> p3js.Group:
    """Group holding one object per batch of a buffer."""
    group = p3js.Group()
    for batch in buffer.batches:
        group.add(batch_object(batch, buffer.channel, opacity=opacity, point_size=point_size))
    logger.debug(f"Built three.js group for {buffer.channel.value}: {len(buffer.batches)} objects")
    return group


def update_group(group: p3js.Group, buffer: RenderBuffer, colors: bool = False) -> None:
    """Copy positions and offsets of an updated buffer into its group.

    The group must have been built from a buffer with the same topology.
    """
    for obj, batch in zip(group.children, buffer.batches):
        obj.geometry.attributes['position'].array = np.asarray(batch.positions, dtype=np.float32)
        if colors:
            obj.geometry.attributes['color'].array = np.asarray(batch.colors, dtype=np.float32)
        obj.position = tuple(float(c) for c in batch.offset)


class PreviewScene:
    """Scene, camera and renderer widget for notebook previews."""

    def __init__(self, width: int = 800, height: int = 600):
        self.width = width
        self.height = height
        self.scene = p3js.Scene()
        self.groups = {}
        self.camera = p3js.PerspectiveCamera(
            position=[3, 3, 3],
            fov=60,
            aspect=self.width / self.height,
            near=0.1,
            far=1000
        )
        self.scene.add(p3js.AmbientLight(color='white', intensity=0.5))
        self.renderer = p3js.Renderer(
            camera=self.camera,
            scene=self.scene,
            antialias=True,
            width=self.width,
            height=self.height,
            controls=[p3js.OrbitControls(controlling=self.camera)]
        )

    def show_buffer(self, buffer: RenderBuffer, name: Optional[str] = None, **kwargs) -> p3js.Group:
        """Add a buffer, replacing any group previously shown under the same name."""
        name = name or buffer.channel.value
        if name in self.groups:
            self.scene.remove(self.groups.pop(name))
        group = buffer_group(buffer, **kwargs)
        self.groups[name] = group
        self.scene.add(group)
        return group

    def hide(self, name: str) -> None:
        if name in self.groups:
            self.scene.remove(self.groups.pop(name))
