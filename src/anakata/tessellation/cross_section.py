"""
Hyperplane cross-sections of a polytope.

Cutting a 4-polytope with the hyperplane w = w_slice leaves, in each cell that
straddles the plane, a convex polygon in 3-space. The polygon's corners are
where the cell's face edges cross the plane:

    t = (w_a - w_slice) / (w_a - w_b)
    p = a + t * (b - a)

Only strict sign changes of (w - w_slice) produce an interpolated crossing; a
vertex lying exactly on the plane is taken as-is. Crossing points are kept per
face (each face crossing the plane contributes one segment of the polygon),
merged after rounding, and ordered by angle around their centroid in the
best-fit plane of the cell's crossings.

A cell whose vertices all lie on the plane is cut into itself. Its crossings
span a solid rather than a polygon, so such a slice is marked ``polyhedral``
and drawn face by face.

The slice offset can be animated back and forth between two bounds with
``SliceState.shift``; the polygons are turned into render buffers with
``tessellate_slices``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..config import PLANE_EPSILON, SLICE_MERGE_DECIMALS, Channel, Reuse, Split, TessellationConfig
from ..polytope_core.polytope import Polytope
from ..projection.projector import rotate_points
from ..projection.rotation import RotationState
from .buffers import RenderBatch, RenderBuffer, make_batch
from .coloring import PALETTES, VertexSample, assign_colors, resolve_palette
from .tessellator import fan_triangles

logger = logging.getLogger(__name__)


class CellSlice(NamedTuple):
    """Intersection of one cell with the slicing hyperplane.

    Attributes:
        cell: Cell index
        polygon: (P, 3) ordered loop; (0, 3) when the cell misses the plane
        face_segments: Face index -> (Q, 3) crossing points of that face
        polyhedral: The whole cell lies in the hyperplane; ``polygon`` then
            holds its corners unordered and each face segment is a full
            face loop
    """
    cell: int
    polygon: np.ndarray
    face_segments: Dict[int, np.ndarray]
    polyhedral: bool = False

    @property
    def is_empty(self) -> bool:
        return len(self.polygon) == 0

    def loops(self) -> List[np.ndarray]:
        """Point loops to draw: the polygon, or every face of an in-plane cell."""
        if self.polyhedral:
            return list(self.face_segments.values())
        return [self.polygon] if len(self.polygon) else []


def _point_key(point: np.ndarray) -> Tuple[float, ...]:
    return tuple(np.round(point, SLICE_MERGE_DECIMALS) + 0.0)


def face_crossings(face: Sequence[int], vertices: np.ndarray, w_slice: float) -> List[np.ndarray]:
    """Points where a face's edges meet the hyperplane, in edge order."""
    points = []
    n = len(face)
    for i in range(n):
        a, b = vertices[face[i]], vertices[face[(i + 1) % n]]
        da, db = a[3] - w_slice, b[3] - w_slice
        if da == 0:
            points.append(a[:3].copy())
        elif da * db < 0:
            t = da / (da - db)
            points.append(a[:3] + t * (b[:3] - a[:3]))
    return points


def order_polygon(points: np.ndarray) -> np.ndarray:
    """Order coplanar points into a loop by angle around their centroid.

    The loop winds counter-clockwise seen from the tip of the best-fit plane
    normal, which is oriented so its largest-magnitude component is positive.
    Fewer than three points, or points on a line, are returned as given.
    """
    if len(points) < 3:
        return points
    centroid = points.mean(axis=0)
    centered = points - centroid
    _, singular, basis = np.linalg.svd(centered)
    if singular[1] < PLANE_EPSILON:
        return points

    normal = basis[2]
    if normal[np.argmax(np.abs(normal))] < 0:
        normal = -normal
    e1 = basis[0]
    e2 = np.cross(normal, e1)
    angles = np.arctan2(centered @ e2, centered @ e1)
    return points[np.argsort(angles, kind="stable")]


def slice_cell(polytope: Polytope, cell_index: int, vertices: np.ndarray, w_slice: float) -> CellSlice:
    """Cross-section of a single cell from (possibly rotated) vertices."""
    face_segments: Dict[int, np.ndarray] = {}
    merged: Dict[Tuple[float, ...], np.ndarray] = {}

    for f in polytope.cells[cell_index]:
        face_points: Dict[Tuple[float, ...], np.ndarray] = {}
        for point in face_crossings(polytope.faces[f], vertices, w_slice):
            face_points.setdefault(_point_key(point), point)
        if face_points:
            face_segments[f] = np.array(list(face_points.values()))
            for key, point in face_points.items():
                merged.setdefault(key, point)

    # a cell whose every vertex is on the plane is a solid, not a polygon
    polyhedral = bool(merged) and all(
        vertices[v][3] == w_slice for v in polytope.cell_vertex_indices(cell_index)
    )
    if not merged:
        polygon = np.zeros((0, 3))
    elif polyhedral:
        polygon = np.array(list(merged.values()))
    else:
        polygon = order_polygon(np.array(list(merged.values())))
    return CellSlice(cell=cell_index, polygon=polygon, face_segments=face_segments, polyhedral=polyhedral)


def slice_polytope(polytope: Polytope,
                   w_slice: float,
                   rotation: Optional[RotationState] = None) -> List[CellSlice]:
    """Intersect every cell with the hyperplane w = w_slice.

    Args:
        polytope: Shape to cut
        w_slice: Offset of the hyperplane along w
        rotation: If given, vertices are rotated in 4D before cutting

    Returns:
        One CellSlice per cell, in cell order
    """
    vertices = np.asarray(polytope.vertices, dtype=float)
    if rotation is not None and len(vertices):
        vertices = rotate_points(vertices, rotation).astype(float)

    slices = [slice_cell(polytope, c, vertices, float(w_slice)) for c in range(polytope.n_cells)]
    logger.debug(
        f"Sliced '{polytope.name}' at w={w_slice}: "
        f"{sum(not s.is_empty for s in slices)}/{len(slices)} cells hit"
    )
    return slices


@dataclass
class SliceState:
    """Animated slice offset.

    Attributes:
        w: Current hyperplane offset
        direction: +1 while moving towards ``hi``, -1 towards ``lo``
    """
    w: float = 0.0
    direction: int = 1

    def shift(self, speed: float, lo: float, hi: float, elapsed: float = 1.0) -> "SliceState":
        """Advance the offset by ``speed * elapsed``, bouncing off the bounds.

        The travelled distance is folded onto a back-and-forth path of length
        ``2 * (hi - lo)``, so any number of reflections in one step lands on
        the same position as stepping in many small increments.
        A negative speed runs the same path backwards: the offset moves
        against ``direction`` and still reflects off the bounds.

        Returns:
            self, for chaining
        """
        span = hi - lo
        if span <= 0:
            self.w, self.direction = lo, 1
            return self

        # position along the unfolded path, 0 at lo moving up
        offset = min(max(self.w, lo), hi) - lo
        u = offset if self.direction > 0 else 2 * span - offset
        u = (u + speed * elapsed) % (2 * span)
        if u <= span:
            self.w, self.direction = lo + u, 1
        else:
            self.w, self.direction = lo + 2 * span - u, -1
        return self


def shift_slice(state: SliceState, speed: float, lo: float, hi: float, elapsed: float = 1.0) -> SliceState:
    """Functional spelling of ``SliceState.shift``; mutates ``state``."""
    return state.shift(speed, lo, hi, elapsed)


class _SliceGroup(NamedTuple):
    """Slot layout of one slice batch before coloring."""
    points: np.ndarray
    cell_ids: np.ndarray
    indices: Optional[np.ndarray]
    cells: Tuple[int, ...]
    faces: Tuple[int, ...]


def _loop_segments(polygon: np.ndarray):
    n = len(polygon)
    if n < 2:
        return []
    if n == 2:
        return [(0, 1)]
    return [(i, (i + 1) % n) for i in range(n)]


def _slice_group(slices: Sequence[CellSlice], channel: Channel, reuse: Reuse) -> _SliceGroup:
    points: List[np.ndarray] = []
    cell_ids: List[int] = []
    triangles: List[Tuple[int, int, int]] = []
    shared: Dict[Tuple[float, ...], int] = {}
    emitted = set()

    def slot(point, cell, share):
        if share:
            key = _point_key(point)
            if key in shared:
                return shared[key]
            shared[key] = len(points)
        points.append(point)
        cell_ids.append(cell)
        return len(points) - 1

    for s in slices:
        if channel == Channel.CELLS:
            for loop in s.loops():
                if len(loop) < 3:
                    continue
                slots = [slot(p, s.cell, reuse == Reuse.ALL) for p in loop]
                triangles.extend((slots[a], slots[b], slots[c]) for a, b, c in fan_triangles(len(slots)))
        elif channel == Channel.EDGES:
            for loop in s.loops():
                for i, j in _loop_segments(loop):
                    if reuse != Reuse.NONE:
                        key = frozenset((_point_key(loop[i]), _point_key(loop[j])))
                        if key in emitted:
                            continue
                        emitted.add(key)
                    points.extend((loop[i], loop[j]))
                    cell_ids.extend((s.cell, s.cell))
        else:
            for p in s.polygon:
                slot(p, s.cell, True)

    return _SliceGroup(
        points=np.array(points, dtype=float).reshape(-1, 3),
        cell_ids=np.asarray(cell_ids, dtype=np.int64),
        indices=np.asarray(triangles, dtype=np.int32).reshape(-1, 3) if channel == Channel.CELLS else None,
        cells=tuple(s.cell for s in slices if not s.is_empty),
        faces=tuple(f for s in slices for f in s.face_segments)
    )


class SliceBounds(NamedTuple):
    """Depth range of a slice, for coloring without the source polytope."""
    radius: float
    w_range: Tuple[float, float]


def slice_bounds(slices: Sequence[CellSlice], w_slice: float = 0.0) -> SliceBounds:
    points = [s.polygon for s in slices if not s.is_empty]
    radius = float(np.linalg.norm(np.concatenate(points), axis=1).max()) if points else 0.0
    return SliceBounds(radius=radius, w_range=(float(w_slice), float(w_slice)))


def _slice_batches(slices: Sequence[CellSlice], channel: Channel, split: Split) -> List[List[CellSlice]]:
    hit = [s for s in slices if not s.is_empty]
    if split == Split.NONE:
        return [hit] if hit else []
    if split == Split.FACES and channel != Channel.CELLS:
        # each crossed face contributes one segment of its cell's polygon
        return [[CellSlice(s.cell, order_polygon(points), {f: points})]
                for s in hit for f, points in s.face_segments.items()]
    return [[s] for s in hit]


def tessellate_slices(slices: Sequence[CellSlice],
                      channel: Channel = Channel.CELLS,
                      config: TessellationConfig = None,
                      palettes: Mapping[str, Sequence] = None,
                      polytope: Optional[Polytope] = None,
                      w_slice: float = 0.0) -> RenderBuffer:
    """Turn cell slices into render batches.

    Slice points are already in 3-space and are not projected. Cells missing
    the plane produce no batch. For the cells channel, polygons of fewer than
    three points are skipped, and ``split=faces`` batches per cell since a
    single face only contributes a segment. Colors see each point as vertex
    -1 with w = ``w_slice``; the cell index doubles as the face index.

    Args:
        slices: Output of ``slice_polytope``
        channel: cells, edges or points
        config: Reuse/split/color options
        palettes: Host palette table
        polytope: The sliced shape, for depth normalization; without it the
            slice points themselves set the depth range
        w_slice: Offset the slices were taken at

    Returns:
        RenderBuffer of the slice
    """
    channel = Channel(channel)
    config = config if config is not None else TessellationConfig()
    palette = resolve_palette(palettes if palettes is not None else PALETTES, config.palette)
    bounds = polytope if polytope is not None else slice_bounds(slices, w_slice)

    batches: List[RenderBatch] = []
    for group_slices in _slice_batches(slices, channel, Split(config.split)):
        group = _slice_group(group_slices, channel, Reuse(config.reuse))
        if channel == Channel.CELLS and not len(group.indices):
            continue
        vertex = VertexSample(
            index=np.full(len(group.points), -1, dtype=np.int64),
            position=group.points,
            w=np.full(len(group.points), float(w_slice))
        )
        colors = assign_colors(
            config.color_generator, bounds, group.cell_ids, group.cell_ids, vertex, palette
        )
        batches.append(make_batch(
            group.points,
            group.indices,
            colors,
            config.cell_size_percent,
            group.cells,
            group.faces,
            vertex.index
        ))
    return RenderBuffer(channel=channel, batches=tuple(batches))
