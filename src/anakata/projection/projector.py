"""
Perspective projection from 4-space to 3-space.

A point is first rotated by the six plane angles of a RotationState, then
scaled by its distance along the fourth axis:

    zoom = 1 + (w * fov) / w_camera
    (x, y, z, w) -> (x / zoom, y / zoom, z / zoom)

Points with positive w shrink towards the origin and points with negative w
grow, which reads as depth along the hidden axis.

Two paths are provided:
- ``project_point``: plain-float reference path for a single point
- ``project_points`` / ``Projector``: vectorized JAX kernel over a vertex
  table. The six (cos, sin) pairs are identical for every point of a frame,
  so they are computed once per distinct angle tuple and memoized.

Both paths agree within single-precision tolerance.
"""

import logging
import math
from functools import lru_cache
from typing import NamedTuple, Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from ..config import ZOOM_EPSILON, ProjectionConfig
from .rotation import PLANES, PLANE_AXES, RotationState

logger = logging.getLogger(__name__)


class PlaneTrig(NamedTuple):
    """Cosine and sine of each plane angle, in application order.

    Attributes:
        cos: (6,) array of cosines
        sin: (6,) array of sines
    """
    cos: np.ndarray
    sin: np.ndarray


@lru_cache(maxsize=64)
def plane_trig(angles: Tuple[float, ...]) -> PlaneTrig:
    """Memoized (cos, sin) pairs for an angle tuple."""
    cos = np.array([math.cos(a) for a in angles])
    sin = np.array([math.sin(a) for a in angles])
    cos.setflags(write=False)
    sin.setflags(write=False)
    return PlaneTrig(cos=cos, sin=sin)


def safe_zoom(zoom: float) -> float:
    """Clamp a zoom factor away from zero, keeping its sign."""
    if abs(zoom) < ZOOM_EPSILON:
        logger.debug(f"Zoom {zoom!r} clamped to +/-{ZOOM_EPSILON}")
        return -ZOOM_EPSILON if zoom < 0 else ZOOM_EPSILON
    return zoom


def rotate_point(state: RotationState, point: Sequence[float]) -> Tuple[float, float, float, float]:
    """Rotate one 4D point by the six plane angles of ``state``."""
    coords = [float(c) for c in point]
    trig = plane_trig(state.angles())
    for k, plane in enumerate(PLANES):
        a, b = PLANE_AXES[plane]
        c, s = trig.cos[k], trig.sin[k]
        ca, cb = coords[a], coords[b]
        coords[a] = ca * c + cb * s
        coords[b] = cb * c - ca * s
    return tuple(coords)


def project_point(state: RotationState,
                  point: Sequence[float],
                  fov: float,
                  w: float) -> Tuple[float, float, float]:
    """Rotate and perspective-project a single 4D point.

    Args:
        state: Current rotation
        point: (x, y, z, w) coordinates
        fov: Field of view along w
        w: Camera distance along w

    Returns:
        (x, y, z) in 3-space
    """
    x, y, z, w_coord = rotate_point(state, point)
    zoom = safe_zoom(1 + (w_coord * fov) / w)
    return (x / zoom, y / zoom, z / zoom)


@jax.jit
def _rotate_kernel(points: jnp.ndarray, cos: jnp.ndarray, sin: jnp.ndarray) -> jnp.ndarray:
    """Apply the six Givens rotations to an (N, 4) array."""
    coords = [points[:, 0], points[:, 1], points[:, 2], points[:, 3]]
    for k, plane in enumerate(PLANES):
        a, b = PLANE_AXES[plane]
        ca, cb = coords[a], coords[b]
        coords[a] = ca * cos[k] + cb * sin[k]
        coords[b] = cb * cos[k] - ca * sin[k]
    return jnp.stack(coords, axis=-1)


@jax.jit
def _project_kernel(points: jnp.ndarray,
                    cos: jnp.ndarray,
                    sin: jnp.ndarray,
                    fov: float,
                    w: float) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """Rotate and project an (N, 4) array.

    Returns:
        (N, 3) projected coordinates and (N,) mask of clamped zoom factors
    """
    rotated = _rotate_kernel(points, cos, sin)
    zoom = 1.0 + (rotated[:, 3] * fov) / w
    clamped = jnp.abs(zoom) < ZOOM_EPSILON
    zoom = jnp.where(clamped, jnp.where(zoom < 0, -ZOOM_EPSILON, ZOOM_EPSILON), zoom)
    return rotated[:, :3] / zoom[:, None], clamped


def rotate_points(vertices: np.ndarray, state: RotationState) -> np.ndarray:
    """Rotate an (N, 4) vertex table; returns a new (N, 4) array."""
    vertices = np.asarray(vertices, dtype=float).reshape(-1, 4)
    trig = plane_trig(state.angles())
    return np.asarray(_rotate_kernel(jnp.asarray(vertices), jnp.asarray(trig.cos), jnp.asarray(trig.sin)))


def project_points(vertices: np.ndarray,
                   state: RotationState,
                   fov: float,
                   w: float) -> np.ndarray:
    """Rotate and project an (N, 4) vertex table to an (N, 3) array."""
    vertices = np.asarray(vertices, dtype=float).reshape(-1, 4)
    trig = plane_trig(state.angles())
    projected, clamped = _project_kernel(
        jnp.asarray(vertices), jnp.asarray(trig.cos), jnp.asarray(trig.sin), fov, w
    )
    n_clamped = int(np.count_nonzero(np.asarray(clamped)))
    if n_clamped:
        logger.debug(f"{n_clamped} zoom factor(s) clamped to +/-{ZOOM_EPSILON}")
    return np.asarray(projected)


class Projector:
    """A rotation state bound to a projection configuration.

    The projector reads ``rotation`` but never mutates it; the host advances
    the state between frames.
    """

    def __init__(self, rotation: RotationState = None, config: ProjectionConfig = None):
        self.rotation = rotation if rotation is not None else RotationState()
        self.config = config if config is not None else ProjectionConfig()

    def __repr__(self):
        return f"Projector(rotation={self.rotation!r}, config={self.config!r})"

    def project(self, point: Sequence[float]) -> Tuple[float, float, float]:
        """Project one point through the reference path."""
        return project_point(self.rotation, point, self.config.fov, self.config.w)

    def project_all(self, vertices: np.ndarray) -> np.ndarray:
        """Project a whole vertex table through the cached kernel."""
        return project_points(vertices, self.rotation, self.config.fov, self.config.w)

    def rotate_all(self, vertices: np.ndarray) -> np.ndarray:
        """Rotated 4D coordinates of a vertex table (no perspective)."""
        return rotate_points(vertices, self.rotation)
