"""
Combinatorial model of a 4-polytope boundary.

A polytope is three index tables:
- vertices: (N, 4) coordinates
- faces: ordered vertex-index loops (planar polygons)
- cells: face-index sets, each bounding one 3-dimensional room

The tables are validated once at construction and are read-only afterwards.
Any change of shape or resolution builds a new Polytope; indices stay stable
for the lifetime of an instance, which lets tessellation topology and
cross-sections be shared between derivations without copying.
"""

import logging
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

from ..errors import MalformedShape

logger = logging.getLogger(__name__)


class Polytope(NamedTuple):
    """Immutable vertex/face/cell complex.

    Attributes:
        name: Display name of the shape
        vertices: (N, 4) read-only array of vertex coordinates
        faces: Tuple of vertex-index tuples
        cells: Tuple of face-index tuples
        w_range: (min, max) of the vertex w coordinates
        radius: Largest vertex distance from the origin
    """
    name: str
    vertices: np.ndarray
    faces: Tuple[Tuple[int, ...], ...]
    cells: Tuple[Tuple[int, ...], ...]
    w_range: Tuple[float, float]
    radius: float

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def n_cells(self) -> int:
        return len(self.cells)

    def cell_faces(self, cell_index: int) -> List[Tuple[int, ...]]:
        """Vertex loops of every face of a cell."""
        return [self.faces[f] for f in self.cells[cell_index]]

    def cell_vertex_indices(self, cell_index: int) -> List[int]:
        """Distinct vertex indices of a cell, in first-seen order."""
        return list(dict.fromkeys(
            v for f in self.cells[cell_index] for v in self.faces[f]
        ))

    def edges(self) -> List[Tuple[int, int]]:
        """Distinct undirected edges of all faces, in first-seen order."""
        seen = {}
        for face in self.faces:
            n = len(face)
            for i in range(n):
                a, b = face[i], face[(i + 1) % n]
                if a != b:
                    seen.setdefault((min(a, b), max(a, b)), None)
        return list(seen)


def validate_polytope(n_vertices: int,
                      faces: Sequence[Sequence[int]],
                      cells: Sequence[Sequence[int]]) -> None:
    """Check that every referenced index is in range.

    Raises:
        MalformedShape: naming the first offending face or cell
    """
    for f, face in enumerate(faces):
        for v in face:
            if not 0 <= v < n_vertices:
                raise MalformedShape(
                    f"Face #{f} references vertex {v}, "
                    f"but the polytope has {n_vertices} vertices",
                    kind="face", index=f
                )
    n_faces = len(faces)
    for c, cell in enumerate(cells):
        for f in cell:
            if not 0 <= f < n_faces:
                raise MalformedShape(
                    f"Cell #{c} references face {f}, "
                    f"but the polytope has {n_faces} faces",
                    kind="cell", index=c
                )


def create_polytope(vertices: Sequence[Sequence[float]],
                    faces: Sequence[Sequence[int]],
                    cells: Sequence[Sequence[int]],
                    name: str = "polytope") -> Polytope:
    """Validate tables and freeze them into a Polytope.

    Args:
        vertices: N points of 4 coordinates each
        faces: Vertex-index loops
        cells: Face-index sets
        name: Display name

    Returns:
        Polytope with read-only tables

    Raises:
        MalformedShape: if an index is out of range or a vertex is not 4D
    """
    vertex_array = np.array(vertices, dtype=float)
    if vertex_array.size == 0:
        vertex_array = np.zeros((0, 4))
    if vertex_array.ndim != 2 or vertex_array.shape[1] != 4:
        raise MalformedShape(
            f"Vertices must be 4-dimensional, got array of shape {vertex_array.shape}",
            kind="vertex"
        )
    vertex_array.setflags(write=False)

    face_table = tuple(tuple(int(v) for v in face) for face in faces)
    cell_table = tuple(tuple(int(f) for f in cell) for cell in cells)
    validate_polytope(len(vertex_array), face_table, cell_table)

    if len(vertex_array):
        w_range = (float(vertex_array[:, 3].min()), float(vertex_array[:, 3].max()))
        radius = float(np.linalg.norm(vertex_array, axis=1).max())
    else:
        w_range = (0.0, 0.0)
        radius = 0.0

    logger.info(
        f"Built '{name}': {len(vertex_array)} vertices, "
        f"{len(face_table)} faces, {len(cell_table)} cells"
    )
    return Polytope(
        name=name,
        vertices=vertex_array,
        faces=face_table,
        cells=cell_table,
        w_range=w_range,
        radius=radius
    )
