"""Polytope model and shape generators."""

from .polytope import (
    Polytope,
    create_polytope,
    validate_polytope
)

from .regular import (
    create_tesseract,
    create_pentachoron,
    create_hexadecachoron,
    create_24cell,
    generate_24cell_vertices,
    compute_24cell_edges,
    compute_24cell_faces,
    compute_24cell_cells
)

from .parametric import (
    Axis,
    parametric_surface,
    parametric_hypersurface,
    angular_hypersurface,
    create_sphere,
    create_torus,
    create_flat_torus
)

from .formula import (
    compile_expression,
    compile_formula
)

from .shapes import (
    ShapeProvider,
    default_shape_table,
    load_shape,
    formula_shape
)

__all__ = [
    'Polytope',
    'create_polytope',
    'validate_polytope',
    'create_tesseract',
    'create_pentachoron',
    'create_hexadecachoron',
    'create_24cell',
    'generate_24cell_vertices',
    'compute_24cell_edges',
    'compute_24cell_faces',
    'compute_24cell_cells',
    'Axis',
    'parametric_surface',
    'parametric_hypersurface',
    'angular_hypersurface',
    'create_sphere',
    'create_torus',
    'create_flat_torus',
    'compile_expression',
    'compile_formula',
    'ShapeProvider',
    'default_shape_table',
    'load_shape',
    'formula_shape'
]
