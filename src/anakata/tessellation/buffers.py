"""
Render buffers handed to the host renderer.

One derivation of one channel yields a RenderBuffer: a tuple of independent
draw batches. Each batch carries positions centered on its own bounding box,
the translation that puts it back in place, and the uniform scale that
shrinks cells apart. A renderer places slot k at

    positions[k] * scale + offset
"""

from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..config import MAX_CELL_SCALE, Channel


class RenderBatch(NamedTuple):
    """One independently addressable draw batch.

    Attributes:
        positions: (K, 3) float32 slot positions, bounding box centered at 0
        indices: (T, 3) int32 triangles for the cells channel, None otherwise
        colors: (K, 3) float32 RGB per slot
        offset: (3,) float32 placement translation (the removed box center)
        scale: Uniform scale factor for the batch
        cells: Cell indices covered by the batch
        faces: Face indices covered by the batch
        vertex_ids: (K,) polytope vertex index per slot (-1 for slice points)
    """
    positions: np.ndarray
    indices: Optional[np.ndarray]
    colors: np.ndarray
    offset: np.ndarray
    scale: float
    cells: Tuple[int, ...]
    faces: Tuple[int, ...]
    vertex_ids: np.ndarray

    @property
    def n_slots(self) -> int:
        return len(self.positions)

    @property
    def n_triangles(self) -> int:
        return 0 if self.indices is None else len(self.indices)

    def world_positions(self) -> np.ndarray:
        """Slot positions with scale and offset applied."""
        return self.positions * self.scale + self.offset


class RenderBuffer(NamedTuple):
    """All batches of one channel for one derivation."""
    channel: Channel
    batches: Tuple[RenderBatch, ...]

    @property
    def n_slots(self) -> int:
        return sum(batch.n_slots for batch in self.batches)

    @property
    def n_triangles(self) -> int:
        return sum(batch.n_triangles for batch in self.batches)

    def flat_positions(self) -> np.ndarray:
        """Concatenated world positions of every batch as a flat float array."""
        if not self.batches:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate([b.world_positions().ravel() for b in self.batches]).astype(np.float32)


def cell_scale(cell_size_percent: float) -> float:
    """Uniform batch scale, capped so adjacent cells never touch."""
    return float(max(0.0, min(cell_size_percent / 100.0, MAX_CELL_SCALE)))


def bounding_box_center(positions: np.ndarray) -> np.ndarray:
    """Center of the axis-aligned bounding box, (0, 0, 0) when empty."""
    if len(positions) == 0:
        return np.zeros(3, dtype=np.float32)
    return ((positions.min(axis=0) + positions.max(axis=0)) / 2).astype(np.float32)


def recenter_into(positions: np.ndarray, offset: np.ndarray, projected: np.ndarray) -> None:
    """Write ``projected`` centered on its bounding box into existing arrays."""
    center = bounding_box_center(projected)
    offset[...] = center
    positions[...] = projected - center


def make_batch(projected: np.ndarray,
               indices: Optional[np.ndarray],
               colors: np.ndarray,
               cell_size_percent: float,
               cells: Sequence[int],
               faces: Sequence[int],
               vertex_ids: np.ndarray) -> RenderBatch:
    """Allocate a batch from uncentered projected slot positions."""
    positions = np.zeros((len(projected), 3), dtype=np.float32)
    offset = np.zeros(3, dtype=np.float32)
    recenter_into(positions, offset, np.asarray(projected, dtype=np.float32).reshape(-1, 3))
    return RenderBatch(
        positions=positions,
        indices=indices,
        colors=np.asarray(colors, dtype=np.float32).reshape(-1, 3),
        offset=offset,
        scale=cell_scale(cell_size_percent),
        cells=tuple(cells),
        faces=tuple(faces),
        vertex_ids=np.asarray(vertex_ids, dtype=np.int64)
    )
