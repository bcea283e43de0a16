"""
Regular convex 4-polytopes as literal or derived index tables.

- Tesseract (8-cell): 16 vertices, 24 square faces, 8 cubic cells
- Pentachoron (5-cell): 5 vertices, 10 triangles, 5 tetrahedral cells
- Hexadecachoron (16-cell, 4-orthoplex): 8 vertices, 32 triangles,
  16 tetrahedral cells
- Icositetrachoron (24-cell): 24 vertices, 96 triangles, 24 octahedral cells

The first three are literal tables. The 24-cell is derived from its vertex
set: edges by equal length, faces as mutually adjacent vertex triples, cells
as the vertices extremal in the direction of each vertex of the dual 24-cell.
Every table goes through ``create_polytope`` and is index-checked once.
"""

import math
from itertools import combinations, permutations, product
from typing import List, Tuple

import numpy as np

from .polytope import Polytope, create_polytope

# Squared edge length of the 24-cell with unit circumradius
EDGE_24CELL_SQUARED = 1.0
EDGE_TOLERANCE = 1e-9


TESSERACT_VERTICES = [
    [1, 1, 1, 1],
    [1, 1, -1, 1],
    [1, -1, -1, 1],
    [1, -1, 1, 1],
    [-1, 1, 1, 1],
    [-1, 1, -1, 1],
    [-1, -1, -1, 1],
    [-1, -1, 1, 1],
    [1, 1, 1, -1],
    [1, 1, -1, -1],
    [1, -1, -1, -1],
    [1, -1, 1, -1],
    [-1, 1, 1, -1],
    [-1, 1, -1, -1],
    [-1, -1, -1, -1],
    [-1, -1, 1, -1],
]

TESSERACT_FACES = [
    # w = +1 cube
    [0, 1, 2, 3],
    [0, 4, 5, 1],
    [0, 3, 7, 4],
    [3, 2, 6, 7],
    [1, 5, 6, 2],
    [4, 7, 6, 5],
    # faces spanning w
    [0, 1, 9, 8],
    [4, 5, 13, 12],
    [3, 2, 10, 11],
    [7, 6, 14, 15],
    [0, 3, 11, 8],
    [4, 7, 15, 12],
    [1, 2, 10, 9],
    [5, 6, 14, 13],
    [0, 4, 12, 8],
    [1, 5, 13, 9],
    [2, 6, 14, 10],
    [3, 7, 15, 11],
    # w = -1 cube
    [11, 10, 9, 8],
    [9, 13, 12, 8],
    [12, 15, 11, 8],
    [15, 14, 10, 11],
    [10, 14, 13, 9],
    [13, 14, 15, 12],
]

TESSERACT_CELLS = [
    [0, 1, 2, 3, 4, 5],         # w = +1
    [0, 6, 12, 8, 10, 18],      # x = +1
    [1, 6, 14, 7, 15, 19],      # y = +1
    [4, 12, 16, 13, 15, 22],    # z = -1
    [3, 8, 16, 9, 17, 21],      # y = -1
    [2, 10, 17, 11, 14, 20],    # z = +1
    [5, 7, 13, 9, 11, 23],      # x = -1
    [18, 19, 20, 21, 22, 23],   # w = -1
]

_W5 = 1 / math.sqrt(5)

PENTACHORON_VERTICES = [
    [1, 1, 1, -_W5],
    [1, -1, -1, -_W5],
    [-1, 1, -1, -_W5],
    [-1, -1, 1, -_W5],
    [0, 0, 0, math.sqrt(5) - _W5],
]

PENTACHORON_FACES = [
    [1, 2, 3],
    [0, 1, 2],
    [0, 1, 3],
    [0, 3, 2],
    [0, 4, 1],
    [0, 2, 4],
    [0, 3, 4],
    [2, 4, 3],
    [1, 3, 4],
    [1, 4, 2],
]

PENTACHORON_CELLS = [
    [0, 1, 2, 3],
    [1, 5, 4, 9],
    [3, 6, 5, 7],
    [2, 4, 6, 8],
    [0, 7, 8, 9],
]

HEXADECACHORON_VERTICES = [
    [-1, 0, 0, 0],
    [1, 0, 0, 0],
    [0, -1, 0, 0],
    [0, 1, 0, 0],
    [0, 0, -1, 0],
    [0, 0, 1, 0],
    [0, 0, 0, -1],
    [0, 0, 0, 1],
]


def _orthoplex_faces() -> List[List[int]]:
    # One triangle per choice of a signed unit vector on three of the four axes
    faces = []
    for axes in combinations(range(4), 3):
        for signs in product((0, 1), repeat=3):
            faces.append([2 * axis + sign for axis, sign in zip(axes, signs)])
    return sorted(faces)


HEXADECACHORON_FACES = _orthoplex_faces()


def _orthoplex_cells(faces: List[List[int]]) -> List[List[int]]:
    # One tetrahedron per sign pattern over all four axes
    cells = []
    for signs in product((0, 1), repeat=4):
        corners = {2 * axis + sign for axis, sign in enumerate(signs)}
        cells.append([f for f, face in enumerate(faces) if set(face) <= corners])
    return cells


HEXADECACHORON_CELLS = _orthoplex_cells(HEXADECACHORON_FACES)


def create_tesseract() -> Polytope:
    """Create the tesseract (8-cell) with vertices at (±1, ±1, ±1, ±1)."""
    return create_polytope(TESSERACT_VERTICES, TESSERACT_FACES, TESSERACT_CELLS, name="tesseract")


def create_pentachoron() -> Polytope:
    """Create the regular 5-cell (4-simplex)."""
    return create_polytope(PENTACHORON_VERTICES, PENTACHORON_FACES, PENTACHORON_CELLS, name="pentachoron")


def create_hexadecachoron() -> Polytope:
    """Create the 16-cell (4-orthoplex) with vertices at the unit axis points."""
    return create_polytope(
        HEXADECACHORON_VERTICES, HEXADECACHORON_FACES, HEXADECACHORON_CELLS,
        name="hexadecachoron"
    )


def generate_24cell_vertices() -> np.ndarray:
    """Generate the 24 vertices of the 24-cell in 4D.

    The vertices consist of:
    - 8 unit vectors: (±1,0,0,0) and permutations
    - 16 half-integer points: (±1/2,±1/2,±1/2,±1/2)

    Returns:
        (24, 4) array of vertex coordinates
    """
    unit_vectors = []
    for i in range(4):
        for sign in (-1, 1):
            vec = np.zeros(4)
            vec[i] = sign
            unit_vectors.append(vec)

    half_int_vertices = [np.array(signs) for signs in product((-0.5, 0.5), repeat=4)]

    return np.stack(unit_vectors + half_int_vertices)


def compute_24cell_edges(vertices: np.ndarray) -> List[Tuple[int, int]]:
    """Edges of the 24-cell: vertex pairs at unit distance (8 per vertex)."""
    edges = []
    n_vertices = len(vertices)
    for i in range(n_vertices):
        for j in range(i + 1, n_vertices):
            dist_squared = np.sum((vertices[i] - vertices[j]) ** 2)
            if abs(dist_squared - EDGE_24CELL_SQUARED) < EDGE_TOLERANCE:
                edges.append((i, j))
    return edges


def compute_24cell_faces(n_vertices: int, edges: List[Tuple[int, int]]) -> List[List[int]]:
    """Triangular faces: vertex triples that are pairwise adjacent."""
    adjacency = [set() for _ in range(n_vertices)]
    for i, j in edges:
        adjacency[i].add(j)
        adjacency[j].add(i)

    faces = []
    for i in range(n_vertices):
        for j, k in combinations(sorted(adjacency[i]), 2):
            if i < j and k in adjacency[j]:
                faces.append([i, j, k])
    return faces


def compute_24cell_cells(vertices: np.ndarray, faces: List[List[int]]) -> List[List[int]]:
    """Octahedral cells, one per vertex of the dual 24-cell.

    The dual vertices are the permutations of (±1, ±1, 0, 0). The six
    vertices maximizing the dot product with a dual vertex span one cell, and
    its faces are the triangles with all three corners among those six.
    """
    directions = sorted(set(
        perm for signs in product((-1, 1), repeat=2)
        for perm in permutations((signs[0], signs[1], 0, 0))
    ), reverse=True)

    cells = []
    for direction in directions:
        dots = vertices @ np.array(direction, dtype=float)
        corners = set(np.flatnonzero(np.abs(dots - dots.max()) < EDGE_TOLERANCE).tolist())
        cells.append([f for f, face in enumerate(faces) if set(face) <= corners])
    return cells


def create_24cell() -> Polytope:
    """Create the 24-cell (icositetrachoron).

    Returns:
        Polytope with 24 vertices, 96 triangular faces and 24 octahedral cells
    """
    vertices = generate_24cell_vertices()
    edges = compute_24cell_edges(vertices)
    faces = compute_24cell_faces(len(vertices), edges)
    cells = compute_24cell_cells(vertices, faces)
    return create_polytope(vertices, faces, cells, name="icositetrachoron")
