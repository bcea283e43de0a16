"""
Color strategies and palettes.

A strategy maps (polytope, cell index, face index, vertex) to one palette
entry. Strategies are pure: identical inputs always give the same color.
They are written with numpy indexing so the same function colors a single
vertex or a whole buffer of slots at once.

Strategies:
- uniform: palette[0] everywhere
- cell: palette[cell % P]
- face: palette[face % P]
- depth: projected z, normalized by the polytope radius, in P buckets
- wDepth: original w, normalized by the polytope's w range, in P buckets
"""

import logging
from typing import Callable, Dict, Mapping, NamedTuple, Sequence, Union

import numpy as np
from matplotlib import colormaps

from ..config import ColorStrategy
from ..errors import ConfigError

logger = logging.getLogger(__name__)

ColorSpec = Union[int, Sequence[float]]


class VertexSample(NamedTuple):
    """What a strategy may know about an emitted vertex.

    Attributes:
        index: Polytope vertex index (or array of indices; -1 for slice points)
        position: Projected (..., 3) coordinates
        w: Fourth coordinate before projection
    """
    index: np.ndarray
    position: np.ndarray
    w: np.ndarray


# Cell colors of the original tesseract scene
MATERIAL_COLORS = [
    0xc3e88d,
    0x009688,
    0x73d1c8,
    0x89ddf3,
    0x82aaff,
    0x7986cb,
    0xc792ea,
    0xff5370,
]

PALETTES: Dict[str, Sequence[ColorSpec]] = {
    "material": MATERIAL_COLORS,
    "white": [0xffffff],
    "axes": [0xff0000, 0x00ff00, 0x0000ff, 0xff00ff],
}


def hex_to_rgb(color: int) -> np.ndarray:
    """0xRRGGBB -> (r, g, b) in [0, 1]."""
    return np.array([(color >> 16) & 0xff, (color >> 8) & 0xff, color & 0xff], dtype=float) / 255.0


def as_palette(colors: Sequence[ColorSpec]) -> np.ndarray:
    """Normalize hex ints or RGB triples into a (P, 3) float array."""
    rows = [hex_to_rgb(c) if isinstance(c, (int, np.integer)) else np.asarray(c, dtype=float)[:3]
            for c in colors]
    if not rows:
        raise ConfigError("A palette needs at least one color")
    return np.stack(rows)


def palette_from_colormap(name: str, n: int = 8) -> np.ndarray:
    """Sample ``n`` evenly spaced colors from a matplotlib colormap."""
    try:
        cmap = colormaps[name]
    except KeyError:
        raise ConfigError(f"Unknown colormap '{name}'") from None
    return np.asarray(cmap(np.linspace(0.0, 1.0, max(n, 1))))[:, :3]


def resolve_palette(table: Mapping[str, Sequence[ColorSpec]], name: str) -> np.ndarray:
    """Look a palette up in the host table, falling back to matplotlib colormaps.

    Raises:
        ConfigError: if neither knows the name
    """
    if name in table:
        return as_palette(table[name])
    if name in colormaps:
        return palette_from_colormap(name)
    raise ConfigError(f"Unknown palette '{name}' (available: {', '.join(sorted(table))})")


def _pick(palette: np.ndarray, index) -> np.ndarray:
    return palette[np.asarray(index, dtype=int) % len(palette)]


def _bucket(t, n: int) -> np.ndarray:
    return np.clip(np.floor(np.asarray(t) * n), 0, n - 1).astype(int)


def uniform_color(polytope, cell_index, face_index, vertex: VertexSample, palette: np.ndarray) -> np.ndarray:
    return _pick(palette, np.zeros_like(np.asarray(vertex.index, dtype=int)))


def cell_color(polytope, cell_index, face_index, vertex: VertexSample, palette: np.ndarray) -> np.ndarray:
    return _pick(palette, cell_index)


def face_color(polytope, cell_index, face_index, vertex: VertexSample, palette: np.ndarray) -> np.ndarray:
    return _pick(palette, face_index)


def depth_color(polytope, cell_index, face_index, vertex: VertexSample, palette: np.ndarray) -> np.ndarray:
    """Bucket the projected z into the palette, far (negative) first."""
    z = np.asarray(vertex.position)[..., 2]
    radius = polytope.radius
    t = (z + radius) / (2 * radius) if radius > 0 else np.full_like(z, 0.5)
    return palette[_bucket(t, len(palette))]


def w_depth_color(polytope, cell_index, face_index, vertex: VertexSample, palette: np.ndarray) -> np.ndarray:
    """Bucket the pre-projection w into the palette, lowest w first."""
    w = np.asarray(vertex.w, dtype=float)
    lo, hi = polytope.w_range
    t = (w - lo) / (hi - lo) if hi > lo else np.full_like(w, 0.5)
    return palette[_bucket(t, len(palette))]


ColorFunction = Callable[..., np.ndarray]

STRATEGIES: Dict[ColorStrategy, ColorFunction] = {
    ColorStrategy.UNIFORM: uniform_color,
    ColorStrategy.CELL: cell_color,
    ColorStrategy.FACE: face_color,
    ColorStrategy.DEPTH: depth_color,
    ColorStrategy.W_DEPTH: w_depth_color,
}

# Strategies whose output changes when only the rotation changes
VIEW_DEPENDENT = frozenset({ColorStrategy.DEPTH})


def get_strategy(name: Union[str, ColorStrategy]) -> ColorFunction:
    try:
        return STRATEGIES[ColorStrategy(name)]
    except ValueError:
        raise ConfigError(f"Unknown color strategy '{name}'") from None


def assign_colors(strategy: Union[str, ColorStrategy],
                  polytope,
                  cell_index,
                  face_index,
                  vertex: VertexSample,
                  palette: np.ndarray) -> np.ndarray:
    """Colors of a batch of slots as a (K, 3) float32 array."""
    colors = get_strategy(strategy)(polytope, cell_index, face_index, vertex, palette)
    return np.asarray(colors, dtype=np.float32).reshape(-1, 3)
