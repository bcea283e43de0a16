"""Render buffers, tessellation, cross-sections and coloring."""

from .buffers import (
    RenderBatch,
    RenderBuffer,
    cell_scale,
    bounding_box_center,
    recenter_into,
    make_batch
)

from .coloring import (
    VertexSample,
    MATERIAL_COLORS,
    PALETTES,
    STRATEGIES,
    VIEW_DEPENDENT,
    hex_to_rgb,
    as_palette,
    palette_from_colormap,
    resolve_palette,
    uniform_color,
    cell_color,
    face_color,
    depth_color,
    w_depth_color,
    get_strategy,
    assign_colors
)

from .tessellator import (
    BatchTopology,
    Tessellator,
    fan_triangles,
    face_owners,
    batch_occurrences,
    build_topology,
    tessellate
)

from .cross_section import (
    CellSlice,
    SliceState,
    face_crossings,
    order_polygon,
    slice_cell,
    SliceBounds,
    slice_bounds,
    slice_polytope,
    shift_slice,
    tessellate_slices
)

__all__ = [
    'RenderBatch',
    'RenderBuffer',
    'cell_scale',
    'bounding_box_center',
    'recenter_into',
    'make_batch',
    'VertexSample',
    'MATERIAL_COLORS',
    'PALETTES',
    'STRATEGIES',
    'VIEW_DEPENDENT',
    'hex_to_rgb',
    'as_palette',
    'palette_from_colormap',
    'resolve_palette',
    'uniform_color',
    'cell_color',
    'face_color',
    'depth_color',
    'w_depth_color',
    'get_strategy',
    'assign_colors',
    'BatchTopology',
    'Tessellator',
    'fan_triangles',
    'face_owners',
    'batch_occurrences',
    'build_topology',
    'tessellate',
    'CellSlice',
    'SliceState',
    'face_crossings',
    'order_polygon',
    'slice_cell',
    'SliceBounds',
    'slice_bounds',
    'slice_polytope',
    'shift_slice',
    'tessellate_slices'
]
