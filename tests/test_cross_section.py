"""
Tests for hyperplane cross-sections
===================================

At w = 0 the tesseract's six side cubes (x, y, z = ±1) each cut to a square
and the two cubes at w = ±1 miss the plane; together the squares close into
the boundary of the cube [-1, 1]^3.

Run with:
    python3 -m pytest tests/test_cross_section.py -v
"""

import itertools
import math

import numpy as np
import pytest

from anakata.config import Channel, ColorStrategy, Reuse, Split, TessellationConfig
from anakata.polytope_core import create_polytope
from anakata.projection import RotationState
from anakata.tessellation import (
    SliceState,
    face_crossings,
    order_polygon,
    shift_slice,
    slice_polytope,
    tessellate_slices,
)


@pytest.fixture(scope="module")
def tesseract_slices(tesseract):
    return slice_polytope(tesseract, 0.0)


# =============================================================================
# SLICING
# =============================================================================

def test_tesseract_at_zero_gives_six_squares(tesseract_slices):
    hit = [s for s in tesseract_slices if not s.is_empty]
    assert len(tesseract_slices) == 8
    assert len(hit) == 6
    assert tesseract_slices[0].is_empty      # w = +1 cube
    assert tesseract_slices[7].is_empty      # w = -1 cube
    for s in hit:
        assert s.polygon.shape == (4, 3)
        assert len(s.face_segments) == 4
        assert all(len(points) == 2 for points in s.face_segments.values())


def test_squares_close_into_a_cube(tesseract_slices):
    corners = {tuple(np.round(p, 6)) for s in tesseract_slices for p in s.polygon}
    assert corners == set(itertools.product((-1.0, 1.0), repeat=3))


def test_polygon_is_ordered_around_its_centroid(tesseract_slices):
    for s in tesseract_slices:
        if s.is_empty:
            continue
        loop = s.polygon
        sides = np.linalg.norm(loop - np.roll(loop, 1, axis=0), axis=1)
        # consecutive corners of a square of side 2, never the diagonal
        np.testing.assert_allclose(sides, 2.0)


def test_outside_w_range_is_empty(tesseract):
    for w_slice in (1.5, -3.0):
        slices = slice_polytope(tesseract, w_slice)
        assert len(slices) == tesseract.n_cells
        assert all(s.is_empty and s.polygon.shape == (0, 3) for s in slices)
        assert all(s.face_segments == {} for s in slices)


def test_vertex_on_plane_is_taken_once():
    # a triangle touching the plane at one corner
    shape = create_polytope([[0, 0, 0, 0], [1, 0, 0, 1], [0, 1, 0, 1]], [[0, 1, 2]], [[0]])
    points = face_crossings(shape.faces[0], shape.vertices, 0.0)
    assert len(points) == 1
    s = slice_polytope(shape, 0.0)[0]
    assert s.polygon.shape == (1, 3)


def test_interpolated_crossing():
    shape = create_polytope([[0, 0, 0, -1], [2, 0, 0, 3], [0, 2, 0, 3]], [[0, 1, 2]], [[0]])
    points = face_crossings(shape.faces[0], shape.vertices, 0.0)
    np.testing.assert_allclose(points, [[0.5, 0, 0], [0, 0.5, 0]])


def test_rotated_slice(tesseract):
    # a quarter turn in xw swaps the roles of x and w
    rotation = RotationState(xw=math.pi / 2)
    slices = slice_polytope(tesseract, 0.0, rotation)
    hit = [s.cell for s in slices if not s.is_empty]
    assert 1 not in hit and 6 not in hit      # x = ±1 cubes now lie at w = ±1
    assert 0 in hit and 7 in hit


def test_order_polygon_orientation():
    square = np.array([[0, 0, 0], [1, 1, 0], [1, 0, 0], [0, 1, 0]], dtype=float)
    loop = order_polygon(square)
    normal = np.cross(loop[1] - loop[0], loop[2] - loop[0])
    assert normal[2] > 0
    assert len(loop) == 4


def test_order_polygon_leaves_degenerate_input():
    line = np.array([[0, 0, 0], [2, 0, 0], [1, 0, 0]], dtype=float)
    np.testing.assert_array_equal(order_polygon(line), line)


def test_cell_in_the_plane_is_drawn_face_by_face(tesseract):
    state = SliceState(w=0.5, direction=1).shift(1.0, -1.0, 1.0, elapsed=0.5)
    assert state.w == pytest.approx(1.0)

    slices = slice_polytope(tesseract, state.w)
    solid = slices[0]                          # the w = +1 cube
    assert solid.polyhedral
    assert len(solid.polygon) == 8
    assert [len(loop) for loop in solid.loops()] == [4] * 6
    assert slices[7].is_empty
    assert not any(s.polyhedral for s in slices[1:])

    buffer = tessellate_slices(slices, Channel.CELLS)
    assert buffer.batches[0].n_triangles == 12
    for batch in buffer.batches:
        corners = batch.positions + batch.offset
        for triangle in batch.indices:
            points = corners[triangle]
            # every triangle lies on one face of the cube [-1, 1]^3
            flat = [axis for axis in range(3)
                    if np.allclose(points[:, axis], points[0, axis]) and abs(points[0, axis]) == pytest.approx(1.0)]
            assert len(flat) == 1
            normal = np.cross(points[1] - points[0], points[2] - points[0])
            assert np.linalg.norm(normal) > 0


def test_cell_in_the_plane_edges(tesseract):
    slices = slice_polytope(tesseract, 1.0)
    whole = tessellate_slices(slices, Channel.EDGES, TessellationConfig(split=Split.NONE))
    # the 12 cube edges, shared by the solid and the six side squares
    assert whole.n_slots == 24


# =============================================================================
# SLICE ANIMATION
# =============================================================================

def test_shift_moves_forward():
    state = SliceState(w=0.0, direction=1)
    state.shift(0.5, -1.0, 1.0, elapsed=1.0)
    assert state.w == pytest.approx(0.5)
    assert state.direction == 1


def test_shift_bounces_at_upper_bound():
    state = shift_slice(SliceState(w=0.9, direction=1), 1.0, -1.0, 1.0, 0.3)
    assert state.w == pytest.approx(0.8)
    assert state.direction == -1


def test_shift_bounces_at_lower_bound():
    state = shift_slice(SliceState(w=-0.8, direction=-1), 1.0, -1.0, 1.0, 0.5)
    assert state.w == pytest.approx(-0.7)
    assert state.direction == 1


def test_shift_over_several_spans():
    state = shift_slice(SliceState(w=0.0, direction=1), 1.0, -1.0, 1.0, 4.0)
    assert state.w == pytest.approx(0.0)
    assert state.direction == 1


def test_shift_stays_within_bounds():
    state = SliceState(w=0.0)
    for _ in range(200):
        state.shift(0.37, -1.0, 1.0, elapsed=1.0)
        assert -1.0 <= state.w <= 1.0


def test_negative_speed_runs_backwards():
    state = shift_slice(SliceState(w=0.5, direction=1), -1.0, -1.0, 1.0, 0.2)
    assert state.w == pytest.approx(0.3)
    assert state.direction == 1


def test_negative_speed_bounces_at_lower_bound():
    state = shift_slice(SliceState(w=-0.9, direction=1), -1.0, -1.0, 1.0, 0.3)
    assert state.w == pytest.approx(-0.8)
    assert state.direction == -1


# =============================================================================
# SLICE TESSELLATION
# =============================================================================

def test_cells_channel_fans_each_square(tesseract_slices):
    buffer = tessellate_slices(tesseract_slices, Channel.CELLS)
    assert len(buffer.batches) == 6
    for batch in buffer.batches:
        assert batch.n_slots == 4
        assert batch.n_triangles == 2
        assert (batch.vertex_ids == -1).all()


def test_split_none_shares_corners(tesseract_slices):
    shared = tessellate_slices(tesseract_slices, Channel.CELLS,
                               TessellationConfig(reuse=Reuse.ALL, split=Split.NONE))
    separate = tessellate_slices(tesseract_slices, Channel.CELLS,
                                 TessellationConfig(reuse=Reuse.NONE, split=Split.NONE))
    assert shared.n_slots == 8
    assert separate.n_slots == 24
    assert shared.n_triangles == separate.n_triangles == 12


def test_edges_channel(tesseract_slices):
    per_cell = tessellate_slices(tesseract_slices, Channel.EDGES)
    assert all(batch.n_slots == 8 for batch in per_cell.batches)
    whole = tessellate_slices(tesseract_slices, Channel.EDGES,
                              TessellationConfig(split=Split.NONE))
    # the 12 edges of the cube, each shared by two squares
    assert whole.n_slots == 24


def test_edges_split_by_face(tesseract_slices):
    buffer = tessellate_slices(tesseract_slices, Channel.EDGES,
                               TessellationConfig(split=Split.FACES))
    assert len(buffer.batches) == 24
    assert all(batch.n_slots == 2 for batch in buffer.batches)


def test_points_channel(tesseract_slices):
    buffer = tessellate_slices(tesseract_slices, Channel.POINTS,
                               TessellationConfig(split=Split.NONE))
    assert buffer.n_slots == 8


def test_empty_slice_gives_no_batches(tesseract):
    buffer = tessellate_slices(slice_polytope(tesseract, 2.0), polytope=tesseract, w_slice=2.0)
    assert buffer.batches == ()


def test_slice_colors_use_cell_index(tesseract_slices):
    palettes = {"two": [0x000000, 0xffffff]}
    buffer = tessellate_slices(tesseract_slices, Channel.CELLS,
                               TessellationConfig(palette="two", color_generator=ColorStrategy.CELL),
                               palettes)
    for batch in buffer.batches:
        (cell,) = batch.cells
        np.testing.assert_allclose(batch.colors, float(cell % 2))


def test_depth_colors_with_and_without_polytope(tesseract, tesseract_slices):
    config = TessellationConfig(color_generator=ColorStrategy.DEPTH, palette="axes")
    with_shape = tessellate_slices(tesseract_slices, Channel.POINTS, config, polytope=tesseract)
    from_points = tessellate_slices(tesseract_slices, Channel.POINTS, config)
    for buffer in (with_shape, from_points):
        for batch in buffer.batches:
            assert batch.colors.shape == (4, 3)
            assert np.isfinite(batch.colors).all()
