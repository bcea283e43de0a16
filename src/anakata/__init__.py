"""
anakata: rotation, projection, tessellation and slicing of 4D polytopes.

The kernel turns a 4-polytope (vertices, faces, cells) into position, index
and color buffers for an external renderer, either by rotating and
perspective-projecting the whole shape into 3-space or by cutting it with a
hyperplane of constant w.
"""

from .errors import (
    AnakataError,
    MalformedShape,
    UnsupportedFaceArity,
    ConfigError,
    FormulaError
)

from .config import (
    Reuse,
    Split,
    ColorStrategy,
    Channel,
    ProjectionConfig,
    TessellationConfig,
    KernelConfig
)

from .logging_config import setup_logging

from .polytope_core import (
    Polytope,
    Axis,
    create_polytope,
    default_shape_table,
    load_shape,
    formula_shape
)

from .projection import (
    RotationState,
    Projector,
    project_point,
    project_points
)

from .tessellation import (
    RenderBatch,
    RenderBuffer,
    CellSlice,
    SliceState,
    Tessellator,
    PALETTES
)

from .kernel import (
    Kernel,
    rotate,
    derive,
    derive_all,
    slice,
    derive_slices,
    shift_slice
)

__version__ = "0.1.0"

__all__ = [
    'AnakataError',
    'MalformedShape',
    'UnsupportedFaceArity',
    'ConfigError',
    'FormulaError',
    'Reuse',
    'Split',
    'ColorStrategy',
    'Channel',
    'ProjectionConfig',
    'TessellationConfig',
    'KernelConfig',
    'setup_logging',
    'Polytope',
    'Axis',
    'create_polytope',
    'default_shape_table',
    'load_shape',
    'formula_shape',
    'RotationState',
    'Projector',
    'project_point',
    'project_points',
    'RenderBatch',
    'RenderBuffer',
    'CellSlice',
    'SliceState',
    'Tessellator',
    'PALETTES',
    'Kernel',
    'rotate',
    'derive',
    'derive_all',
    'slice',
    'derive_slices',
    'shift_slice'
]
