"""
Parametric generators for 4-manifolds.

Two families of generators live here:

1. Grid generators driven by an arbitrary point function
   - ``parametric_surface``: f(u, v) -> Point4, quad faces, one single-face
     cell per quad
   - ``parametric_hypersurface``: f(u, v, w) -> Point4, quad faces on the
     three grid-plane families, one hexahedral cell per grid cube
   Each parameter is described by an ``Axis`` (range, resolution, whether
   the last sample reaches ``max``, whether the axis wraps around, and
   whether cells are merged along it).

2. Angular generators for the 3-sphere and the 3-torus. Vertices are
   classified by which discretized theta, phi and gamma produced them; cells
   are then built by walking consecutive rings inside each class. This gives
   three families of cells, one per angle, that together cover the
   hypersurface exactly once.

A resolution of zero (or less) yields an empty polytope rather than an error.
"""

import logging
import math
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .polytope import Polytope, create_polytope

logger = logging.getLogger(__name__)

Point4 = Tuple[float, float, float, float]


class Axis(NamedTuple):
    """Sampling of one parameter.

    Attributes:
        min: Start of the parameter range
        max: End of the parameter range
        resolution: Number of steps the range is divided into
        inclusive: Whether the final sample equals ``max`` (ignored when looping)
        loop: Whether index ``resolution`` wraps back to index 0. A looped
            axis with fewer than 3 samples is sampled but does not wrap,
            since closing a ring of 1 or 2 samples would repeat its quads
        group: Whether neighbouring quads along this axis share one cell
    """
    min: float = 0.0
    max: float = 1.0
    resolution: int = 8
    inclusive: bool = True
    loop: bool = False
    group: bool = False

    @property
    def count(self) -> int:
        """Number of samples on this axis."""
        if self.resolution <= 0:
            return 0
        if self.loop or not self.inclusive:
            return int(self.resolution)
        return int(self.resolution) + 1

    @property
    def wraps(self) -> bool:
        # Fewer than 3 samples cannot close a ring without doubling quads
        return self.loop and self.count >= 3

    def samples(self) -> np.ndarray:
        """Parameter values, ``min + i * step`` for each sample index."""
        if self.count == 0:
            return np.zeros(0)
        step = (self.max - self.min) / self.resolution
        return self.min + step * np.arange(self.count)

    def segments(self) -> List[Tuple[int, int]]:
        """Consecutive sample-index pairs; the last wraps to 0 when looping."""
        n = self.count
        if self.wraps:
            return [(i, (i + 1) % n) for i in range(n)]
        return [(i, i + 1) for i in range(n - 1)]


def _grouped_key(indices: Sequence[int], axes: Sequence[Axis]) -> Tuple[Optional[int], ...]:
    return tuple(None if axis.group else i for i, axis in zip(indices, axes))


def parametric_surface(fn: Callable[[float, float], Sequence[float]],
                       u: Axis,
                       v: Axis,
                       name: str = "surface") -> Polytope:
    """Sample a 2-parameter surface in 4-space.

    Every four neighbouring grid vertices form a quad face. Each quad is its
    own one-face cell unless ``u.group`` or ``v.group`` merges the quads
    along that axis into a single thicker cell.

    Args:
        fn: Point function (u, v) -> (x, y, z, w)
        u: First parameter axis (slow index)
        v: Second parameter axis (fast index)
        name: Display name

    Returns:
        Polytope of quads
    """
    us, vs = u.samples(), v.samples()
    nv = len(vs)
    vertices = [fn(pu, pv) for pu in us for pv in vs]

    def vid(i, j):
        return i * nv + j

    faces = []
    cells: Dict[Tuple[Optional[int], ...], List[int]] = {}
    for i0, i1 in u.segments():
        for j0, j1 in v.segments():
            faces.append([vid(i0, j0), vid(i1, j0), vid(i1, j1), vid(i0, j1)])
            cells.setdefault(_grouped_key((i0, j0), (u, v)), []).append(len(faces) - 1)

    return create_polytope(vertices, faces, list(cells.values()), name=name)


def parametric_hypersurface(fn: Callable[[float, float, float], Sequence[float]],
                            u: Axis,
                            v: Axis,
                            w: Axis,
                            name: str = "hypersurface") -> Polytope:
    """Sample a 3-parameter hypersurface in 4-space.

    The grid is cut into hexahedra. Their quad faces lie on three families of
    grid planes (u, v or w held fixed) and are shared between neighbouring
    hexahedra. Axis grouping merges hexahedra along that axis.

    Args:
        fn: Point function (u, v, w) -> (x, y, z, w)
        u, v, w: Parameter axes, slowest to fastest
        name: Display name

    Returns:
        Polytope of hexahedral cells
    """
    us, vs, ws = u.samples(), v.samples(), w.samples()
    nv, nw = len(vs), len(ws)
    vertices = [fn(pu, pv, pw) for pu in us for pv in vs for pw in ws]

    def vid(i, j, k):
        return (i * nv + j) * nw + k

    faces: List[List[int]] = []
    face_ids: Dict[Tuple, int] = {}

    def face(key, loop):
        if key not in face_ids:
            face_ids[key] = len(faces)
            faces.append(loop)
        return face_ids[key]

    cells: Dict[Tuple[Optional[int], ...], List[int]] = {}
    for i0, i1 in u.segments():
        for j0, j1 in v.segments():
            for k0, k1 in w.segments():
                cube = []
                for i in (i0, i1):
                    cube.append(face(("u", i, j0, k0),
                                     [vid(i, j0, k0), vid(i, j1, k0), vid(i, j1, k1), vid(i, j0, k1)]))
                for j in (j0, j1):
                    cube.append(face(("v", i0, j, k0),
                                     [vid(i0, j, k0), vid(i1, j, k0), vid(i1, j, k1), vid(i0, j, k1)]))
                for k in (k0, k1):
                    cube.append(face(("w", i0, j0, k),
                                     [vid(i0, j0, k), vid(i1, j0, k), vid(i1, j1, k), vid(i0, j1, k)]))
                cell = cells.setdefault(_grouped_key((i0, j0, k0), (u, v, w)), [])
                cell.extend(f for f in cube if f not in cell)

    return create_polytope(vertices, faces, list(cells.values()), name=name)


def _ring_cell(vertex_class: List[int], ring: int, faces: List[List[int]]) -> List[int]:
    """Connect consecutive rings of a vertex class with quads.

    ``vertex_class`` is a sequence of rings of length ``ring``; quad i of
    round r joins ring r to ring r + 1 and wraps modulo the ring length.
    """
    cell = []
    for rounds in range(len(vertex_class) // ring - 1):
        base = rounds * ring
        base_next = base + ring
        for i in range(ring):
            faces.append([
                vertex_class[base + i],
                vertex_class[base + (i + 1) % ring],
                vertex_class[base_next + (i + 1) % ring],
                vertex_class[base_next + i],
            ])
            cell.append(len(faces) - 1)
    return cell


def angular_hypersurface(point_fn: Callable[[float, float, float], Point4],
                         resolution: int = 8,
                         name: str = "angular") -> Polytope:
    """Classified-ring construction over (theta, phi, gamma).

    theta and phi take ``resolution + 1`` values in [0, π], gamma takes
    ``2 * resolution`` values in [0, 2π). Cells come in three families:
    - one per theta value, walking phi rings of the gamma loop
    - one per phi value, walking theta rings of the gamma loop
    - one per gamma < resolution, splicing gamma and gamma + resolution
      (the second reversed per theta row) into a great-circle ring of
      length 2 * (resolution + 1)

    Args:
        point_fn: Map (theta, phi, gamma) -> Point4
        resolution: Number of steps per π
        name: Display name

    Returns:
        Polytope covering the hypersurface
    """
    vertices: List[Point4] = []
    by_theta: Dict[int, List[int]] = {}
    by_phi: Dict[int, List[int]] = {}
    by_gamma: Dict[int, List[int]] = {}

    for theta in range(resolution + 1):
        for phi in range(resolution + 1):
            for gamma in range(2 * resolution):
                index = len(vertices)
                by_theta.setdefault(theta, []).append(index)
                by_phi.setdefault(phi, []).append(index)
                by_gamma.setdefault(gamma, []).append(index)
                vertices.append(point_fn(
                    theta * math.pi / resolution,
                    phi * math.pi / resolution,
                    gamma * math.pi / resolution,
                ))

    faces: List[List[int]] = []
    cells: List[List[int]] = []
    gamma_ring = 2 * resolution
    for vertex_class in by_theta.values():
        cells.append(_ring_cell(vertex_class, gamma_ring, faces))
    for vertex_class in by_phi.values():
        cells.append(_ring_cell(vertex_class, gamma_ring, faces))

    row = resolution + 1
    for gamma in range(resolution):
        one, two = by_gamma[gamma], by_gamma[gamma + resolution]
        spliced: List[int] = []
        for rounds in range(len(one) // row):
            spliced.extend(one[rounds * row:(rounds + 1) * row])
            spliced.extend(reversed(two[rounds * row:(rounds + 1) * row]))
        cells.append(_ring_cell(spliced, 2 * row, faces))

    return create_polytope(vertices, faces, cells, name=name)


def create_sphere(radius: float = 1.0, resolution: int = 8) -> Polytope:
    """Create a 3-sphere of the given radius in hyperspherical coordinates."""
    def point(theta, phi, gamma):
        return (
            radius * math.cos(theta),
            radius * math.sin(theta) * math.cos(phi),
            radius * math.sin(theta) * math.sin(phi) * math.cos(gamma),
            radius * math.sin(theta) * math.sin(phi) * math.sin(gamma),
        )

    return angular_hypersurface(point, resolution, name="threesphere")


def create_torus(r1: float = 0.1, r2: float = 0.5, r3: float = 1.0, resolution: int = 8) -> Polytope:
    """Create a 3-torus: a circle of radius r1 swept around r2, then around r3."""
    def point(theta, phi, gamma):
        inner = r2 + r1 * math.sin(theta)
        outer = r3 + inner * math.sin(phi)
        return (
            r1 * math.cos(theta),
            inner * math.cos(phi),
            outer * math.cos(gamma),
            outer * math.sin(gamma),
        )

    return angular_hypersurface(point, resolution, name="threetorus")


def create_flat_torus(r1: float = 1.0, r2: float = 0.5, resolution: int = 32) -> Polytope:
    """Create the flat (Clifford) torus as a single cell of looped quads."""
    def point(theta, phi):
        return (
            r1 * math.cos(theta),
            r1 * math.sin(theta),
            r2 * math.cos(phi),
            r2 * math.sin(phi),
        )

    axis = Axis(0.0, 2 * math.pi, 2 * resolution, loop=True, group=True)
    return parametric_surface(point, axis, axis, name="flattorus")
