"""
Default shape table.

The engine itself is generic over "something that returns a Polytope". Hosts
that expose named presets pass a name -> provider mapping; this module builds
the stock one and resolves names against any such mapping.
"""

import logging
from functools import partial
from typing import Callable, Dict, Mapping, Sequence

from ..errors import ConfigError
from .formula import compile_formula
from .parametric import (
    Axis,
    create_flat_torus,
    create_sphere,
    create_torus,
    parametric_hypersurface,
    parametric_surface,
)
from .polytope import Polytope
from .regular import create_24cell, create_hexadecachoron, create_pentachoron, create_tesseract

logger = logging.getLogger(__name__)

ShapeProvider = Callable[[], Polytope]


def default_shape_table(resolution: int = 8) -> Dict[str, ShapeProvider]:
    """Stock presets, keyed by the names hosts show to users.

    Args:
        resolution: Steps per π for the angular generators

    Returns:
        Mapping of shape name to zero-argument provider
    """
    return {
        "tesseract": create_tesseract,
        "pentachoron": create_pentachoron,
        "hexadecachoron": create_hexadecachoron,
        "icositetrachoron": create_24cell,
        "threesphere": partial(create_sphere, 1.0, resolution),
        "threetorus": partial(create_torus, 0.1, 0.5, 1.0, resolution),
        "flattorus": partial(create_flat_torus, 1.0, 0.5, 4 * resolution),
    }


def load_shape(table: Mapping[str, ShapeProvider], name: str) -> Polytope:
    """Build the named shape from a host-supplied table.

    Raises:
        ConfigError: if the table has no such shape
    """
    try:
        provider = table[name]
    except KeyError:
        raise ConfigError(
            f"Unknown shape '{name}' (available: {', '.join(sorted(table))})"
        ) from None
    logger.info(f"Loading shape '{name}'")
    return provider()


def formula_shape(expressions: Sequence[str],
                  axes: Sequence[Axis],
                  name: str = "formula") -> Polytope:
    """Build a surface or hypersurface from coordinate expressions.

    Two axes give a surface over (u, v); three give a hypersurface over
    (u, v, w).

    Args:
        expressions: x, y, z and w expressions in the parameters
        axes: Axis per parameter
        name: Display name

    Raises:
        FormulaError: if an expression is rejected
        ConfigError: if the number of axes is not 2 or 3
    """
    if len(axes) == 2:
        fn = compile_formula(expressions, ("u", "v"))
        return parametric_surface(fn, axes[0], axes[1], name=name)
    if len(axes) == 3:
        fn = compile_formula(expressions, ("u", "v", "w"))
        return parametric_hypersurface(fn, axes[0], axes[1], axes[2], name=name)
    raise ConfigError(f"Formula shapes take 2 or 3 axes, got {len(axes)}")
