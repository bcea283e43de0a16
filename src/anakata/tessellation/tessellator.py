"""
Tessellation of a polytope into render buffers.

The work is split in two phases:

1. Topology (rebuilt only when the polytope, reuse policy or split policy
   changes): which polytope vertex fills each buffer slot, which cell and
   face the slot belongs to, and the triangle index lists.
2. Projection (every frame): project every polytope vertex once, gather the
   slot positions, recenter each batch on its bounding box, recolor when the
   color depends on the view.

Reuse policies (slot sharing inside one batch):
- all: one slot per distinct vertex index, shared by every face
- faces: one set of slots per distinct face, shared within its triangulation
- none: one set of slots per (cell, face) occurrence; a face bounding two
  cells is duplicated

Split policies (batching):
- none: one batch for the whole polytope
- cells: one batch per cell
- faces: one batch per face

Faces are fan-triangulated from their first vertex, giving N - 2 triangles
for a face of length N. Faces must be convex and planar; that precondition is
not checked.
"""

import logging
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..config import Channel, ColorStrategy, Reuse, Split, TessellationConfig
from ..errors import UnsupportedFaceArity
from ..polytope_core.polytope import Polytope
from ..projection.projector import Projector
from .buffers import RenderBuffer, make_batch, recenter_into
from .coloring import PALETTES, VIEW_DEPENDENT, VertexSample, assign_colors, resolve_palette

logger = logging.getLogger(__name__)

# (cell index, face index); cell is -1 for a face no cell references
Occurrence = Tuple[int, int]


class BatchTopology(NamedTuple):
    """Slot layout of one batch, independent of the rotation.

    Attributes:
        vertex_ids: (K,) polytope vertex per slot
        cell_ids: (K,) cell the slot was emitted for
        face_ids: (K,) face the slot was emitted for
        indices: (T, 3) triangles, or None for edge and point channels
        cells: Cells covered by the batch
        faces: Faces covered by the batch
    """
    vertex_ids: np.ndarray
    cell_ids: np.ndarray
    face_ids: np.ndarray
    indices: Optional[np.ndarray]
    cells: Tuple[int, ...]
    faces: Tuple[int, ...]


def fan_triangles(n: int, base: int = 0) -> List[Tuple[int, int, int]]:
    """Fan triangulation of an n-gon whose slots start at ``base``."""
    return [(base, base + i + 1, base + i + 2) for i in range(n - 2)]


def face_owners(polytope: Polytope) -> List[int]:
    """First cell referencing each face, -1 for faces outside every cell."""
    owners = [-1] * polytope.n_faces
    for c, cell in enumerate(polytope.cells):
        for f in cell:
            if owners[f] < 0:
                owners[f] = c
    return owners


def batch_occurrences(polytope: Polytope, split: Split) -> List[List[Occurrence]]:
    """Group (cell, face) occurrences into batches."""
    if split == Split.CELLS:
        return [[(c, f) for f in cell] for c, cell in enumerate(polytope.cells)]
    if split == Split.FACES:
        owners = face_owners(polytope)
        return [[(owners[f], f)] for f in range(polytope.n_faces)]
    occurrences = [(c, f) for c, cell in enumerate(polytope.cells) for f in cell]
    return [occurrences] if occurrences else []


def _distinct_faces(occurrences: Sequence[Occurrence]) -> List[Occurrence]:
    seen = {}
    for c, f in occurrences:
        seen.setdefault(f, c)
    return [(c, f) for f, c in seen.items()]


def _topology(vertex_ids, cell_ids, face_ids, indices, occurrences) -> BatchTopology:
    return BatchTopology(
        vertex_ids=np.asarray(vertex_ids, dtype=np.int64),
        cell_ids=np.asarray(cell_ids, dtype=np.int64),
        face_ids=np.asarray(face_ids, dtype=np.int64),
        indices=None if indices is None else np.asarray(indices, dtype=np.int32).reshape(-1, 3),
        cells=tuple(dict.fromkeys(c for c, _ in occurrences if c >= 0)),
        faces=tuple(dict.fromkeys(f for _, f in occurrences))
    )


def cell_topology(polytope: Polytope, occurrences: Sequence[Occurrence], reuse: Reuse) -> BatchTopology:
    """Slots and triangles for the filled-cell channel.

    Raises:
        UnsupportedFaceArity: for a face with fewer than 3 vertices
    """
    items = list(occurrences) if reuse == Reuse.NONE else _distinct_faces(occurrences)
    vertex_ids, cell_ids, face_ids, triangles = [], [], [], []
    shared: Dict[int, int] = {}

    for c, f in items:
        face = polytope.faces[f]
        if len(face) < 3:
            raise UnsupportedFaceArity(f, len(face))
        if reuse == Reuse.ALL:
            for v in face:
                if v not in shared:
                    shared[v] = len(vertex_ids)
                    vertex_ids.append(v)
                    cell_ids.append(c)
                    face_ids.append(f)
            slots = [shared[v] for v in face]
            triangles.extend((slots[a], slots[b], slots[d]) for a, b, d in fan_triangles(len(face)))
        else:
            base = len(vertex_ids)
            vertex_ids.extend(face)
            cell_ids.extend([c] * len(face))
            face_ids.extend([f] * len(face))
            triangles.extend(fan_triangles(len(face), base))

    return _topology(vertex_ids, cell_ids, face_ids, triangles, items)


def edge_topology(polytope: Polytope, occurrences: Sequence[Occurrence], reuse: Reuse) -> BatchTopology:
    """Endpoint pairs for the edge channel (slots 2k, 2k + 1 form segment k)."""
    items = list(occurrences) if reuse == Reuse.NONE else _distinct_faces(occurrences)
    vertex_ids, cell_ids, face_ids = [], [], []
    emitted = set()

    for c, f in items:
        face = polytope.faces[f]
        n = len(face)
        for i in range(n):
            a, b = face[i], face[(i + 1) % n]
            if reuse != Reuse.NONE:
                key = (min(a, b), max(a, b))
                if a == b or key in emitted:
                    continue
                emitted.add(key)
            vertex_ids.extend((a, b))
            cell_ids.extend((c, c))
            face_ids.extend((f, f))

    return _topology(vertex_ids, cell_ids, face_ids, None, items)


def point_topology(polytope: Polytope, occurrences: Sequence[Occurrence], reuse: Reuse) -> BatchTopology:
    """One slot per distinct vertex of the batch."""
    seen: Dict[int, Occurrence] = {}
    for c, f in occurrences:
        for v in polytope.faces[f]:
            seen.setdefault(v, (c, f))
    return _topology(
        list(seen),
        [c for c, _ in seen.values()],
        [f for _, f in seen.values()],
        None,
        occurrences
    )


_BUILDERS = {
    Channel.CELLS: cell_topology,
    Channel.EDGES: edge_topology,
    Channel.POINTS: point_topology,
}


def build_topology(polytope: Polytope, channel: Channel, reuse: Reuse, split: Split) -> List[BatchTopology]:
    """Slot layout of every batch of a channel."""
    builder = _BUILDERS[Channel(channel)]
    batches = [builder(polytope, occurrences, Reuse(reuse))
               for occurrences in batch_occurrences(polytope, Split(split))]
    logger.debug(
        f"Topology for '{polytope.name}' ({Channel(channel).value}, reuse={Reuse(reuse).value}, "
        f"split={Split(split).value}): {len(batches)} batches, "
        f"{sum(len(b.vertex_ids) for b in batches)} slots"
    )
    return batches


class Tessellator:
    """Derives and refreshes the render buffer of one channel.

    Args:
        polytope: Shape to tessellate
        channel: cells, edges or points
        config: Reuse/split/color options
        palettes: Host palette table (name -> colors)
    """

    def __init__(self,
                 polytope: Polytope,
                 channel: Channel = Channel.CELLS,
                 config: TessellationConfig = None,
                 palettes: Mapping[str, Sequence] = None):
        self.polytope = polytope
        self.channel = Channel(channel)
        self.config = config if config is not None else TessellationConfig()
        self.palettes = palettes if palettes is not None else PALETTES
        self._topology: Optional[List[BatchTopology]] = None
        self._buffer: Optional[RenderBuffer] = None

    @property
    def topology(self) -> List[BatchTopology]:
        if self._topology is None:
            self._topology = build_topology(
                self.polytope, self.channel, self.config.reuse, self.config.split
            )
        return self._topology

    @property
    def buffer(self) -> Optional[RenderBuffer]:
        """Most recent buffer, None before the first derivation."""
        return self._buffer

    def configure(self, polytope: Polytope = None, config: TessellationConfig = None) -> None:
        """Swap the shape or options.

        Topology is dropped only when the polytope, reuse or split policy
        changes; any change drops the current buffer so the next call
        allocates fresh arrays.
        """
        rebuild = False
        if polytope is not None and polytope is not self.polytope:
            self.polytope = polytope
            rebuild = True
        if config is not None:
            if (Reuse(config.reuse), Split(config.split)) != (Reuse(self.config.reuse), Split(self.config.split)):
                rebuild = True
            self.config = config
        if rebuild:
            self._topology = None
        self._buffer = None

    def _colors(self, batch: BatchTopology, projected: np.ndarray, palette: np.ndarray) -> np.ndarray:
        vertex = VertexSample(
            index=batch.vertex_ids,
            position=projected[batch.vertex_ids],
            w=self.polytope.vertices[batch.vertex_ids, 3]
        )
        return assign_colors(
            self.config.color_generator, self.polytope,
            batch.cell_ids, batch.face_ids, vertex, palette
        )

    def derive(self, projector: Projector) -> RenderBuffer:
        """Project the polytope and allocate a fresh buffer."""
        projected = projector.project_all(self.polytope.vertices)
        palette = resolve_palette(self.palettes, self.config.palette)
        batches = tuple(
            make_batch(
                projected[batch.vertex_ids],
                batch.indices,
                self._colors(batch, projected, palette),
                self.config.cell_size_percent,
                batch.cells,
                batch.faces,
                batch.vertex_ids
            )
            for batch in self.topology
        )
        self._buffer = RenderBuffer(channel=self.channel, batches=batches)
        return self._buffer

    def update(self, projector: Projector) -> RenderBuffer:
        """Re-project into the existing buffer without touching topology.

        Positions and offsets are overwritten in place; colors only when the
        color strategy depends on the view. The result equals a fresh
        ``derive`` with the same inputs.
        """
        if self._buffer is None:
            return self.derive(projector)

        projected = projector.project_all(self.polytope.vertices)
        recolor = ColorStrategy(self.config.color_generator) in VIEW_DEPENDENT
        palette = resolve_palette(self.palettes, self.config.palette) if recolor else None
        for topology, batch in zip(self.topology, self._buffer.batches):
            recenter_into(batch.positions, batch.offset, projected[topology.vertex_ids])
            if recolor:
                batch.colors[...] = self._colors(topology, projected, palette)
        return self._buffer


def tessellate(polytope: Polytope,
               projector: Projector,
               channel: Channel = Channel.CELLS,
               config: TessellationConfig = None,
               palettes: Mapping[str, Sequence] = None) -> RenderBuffer:
    """One-shot derivation of a channel."""
    return Tessellator(polytope, channel, config, palettes).derive(projector)
