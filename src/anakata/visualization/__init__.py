"""Notebook preview bridges for render buffers (pythreejs and plotly)."""

from .threejs import (
    PreviewScene,
    batch_object,
    buffer_group,
    update_group
)

from .plotly_preview import (
    buffer_trace,
    buffers_figure
)

__all__ = [
    'PreviewScene',
    'batch_object',
    'buffer_group',
    'update_group',
    'buffer_trace',
    'buffers_figure'
]
