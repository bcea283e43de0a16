"""
Tests for tessellation, render buffers and color strategies
===========================================================

Buffer sizes for the tesseract (8 cubic cells, 6 square faces each):

    reuse=none   per cell: 6 * 4 = 24 slots, 12 triangles
    reuse=faces  per cell: 24 slots (the faces of one cell are distinct)
    reuse=all    per cell: 8 slots (the cube's corners)

Run with:
    python3 -m pytest tests/test_tessellation.py -v
"""

import math

import numpy as np
import pytest

from anakata.config import MAX_CELL_SCALE, Channel, ColorStrategy, Reuse, Split, TessellationConfig
from anakata.errors import ConfigError, UnsupportedFaceArity
from anakata.polytope_core import create_polytope, create_sphere
from anakata.projection import Projector, RotationState
from anakata.tessellation import (
    PALETTES,
    Tessellator,
    VertexSample,
    as_palette,
    assign_colors,
    cell_scale,
    fan_triangles,
    palette_from_colormap,
    resolve_palette,
    tessellate,
    w_depth_color,
)


def _config(reuse=Reuse.ALL, split=Split.CELLS, color=ColorStrategy.CELL, palette="material", size=100.0):
    return TessellationConfig(reuse=reuse, split=split, color_generator=color,
                              palette=palette, cell_size_percent=size)


@pytest.fixture
def projector():
    return Projector(RotationState(xy=0.4, xw=1.2, zw=0.3))


# =============================================================================
# TRIANGULATION AND REUSE
# =============================================================================

@pytest.mark.parametrize("n", [3, 4, 5, 8])
def test_fan_has_n_minus_two_triangles(n):
    triangles = fan_triangles(n)
    assert len(triangles) == n - 2
    assert all(t[0] == 0 for t in triangles)
    assert triangles[-1] == (0, n - 2, n - 1)


def test_reuse_none_duplicates_every_face(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config(reuse=Reuse.NONE))
    assert len(buffer.batches) == 8
    for batch, cell in zip(buffer.batches, tesseract.cells):
        assert batch.n_slots == sum(len(tesseract.faces[f]) for f in cell) == 24
        assert batch.n_triangles == 12
        assert batch.indices.dtype == np.int32
        assert batch.positions.dtype == np.float32


def test_reuse_all_shares_cell_vertices(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config(reuse=Reuse.ALL))
    for c, batch in enumerate(buffer.batches):
        assert batch.n_slots == len(tesseract.cell_vertex_indices(c)) == 8
        assert batch.n_triangles == 12
        assert batch.indices.max() < batch.n_slots


def test_split_none_totals(tesseract, projector):
    def slots(reuse):
        buffer = tessellate(tesseract, projector, Channel.CELLS, _config(reuse=reuse, split=Split.NONE))
        assert len(buffer.batches) == 1
        return buffer.n_slots

    assert slots(Reuse.NONE) == 8 * 24
    assert slots(Reuse.FACES) == 24 * 4
    assert slots(Reuse.ALL) == 16


def test_split_faces_one_batch_per_face(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config(split=Split.FACES))
    assert len(buffer.batches) == tesseract.n_faces
    assert all(batch.n_triangles == 2 for batch in buffer.batches)
    assert [batch.faces for batch in buffer.batches] == [(f,) for f in range(24)]


def test_triangles_reference_face_vertices(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config(reuse=Reuse.ALL))
    batch = buffer.batches[0]
    cell_vertices = set(tesseract.cell_vertex_indices(0))
    for triangle in batch.indices:
        ids = {int(batch.vertex_ids[slot]) for slot in triangle}
        assert len(ids) == 3
        assert ids <= cell_vertices


def test_short_face_raises_for_cells_channel():
    shape = create_polytope(
        [[0, 0, 0, 0], [1, 0, 0, 0], [0, 1, 0, 0]],
        [[0, 1, 2], [0, 1]],
        [[0, 1]]
    )
    with pytest.raises(UnsupportedFaceArity) as info:
        tessellate(shape, Projector(), Channel.CELLS)
    assert info.value.face_index == 1
    assert info.value.arity == 2
    # edges of a 2-gon are still drawable
    assert tessellate(shape, Projector(), Channel.EDGES).n_slots > 0


@pytest.mark.parametrize("split", list(Split))
@pytest.mark.parametrize("channel", list(Channel))
def test_empty_shape_gives_empty_buffer(channel, split):
    buffer = tessellate(create_sphere(resolution=0), Projector(), channel, _config(split=split))
    assert buffer.batches == ()
    assert buffer.n_slots == 0
    assert buffer.flat_positions().size == 0


# =============================================================================
# EDGE AND POINT CHANNELS
# =============================================================================

def test_edges_are_endpoint_pairs(tesseract, projector):
    shared = tessellate(tesseract, projector, Channel.EDGES, _config(reuse=Reuse.ALL))
    duplicated = tessellate(tesseract, projector, Channel.EDGES, _config(reuse=Reuse.NONE))
    for batch in shared.batches:
        assert batch.indices is None
        assert batch.n_slots == 2 * 12
    for batch in duplicated.batches:
        assert batch.n_slots == 2 * 24


def test_edges_whole_polytope(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.EDGES, _config(split=Split.NONE))
    assert buffer.n_slots == 2 * len(tesseract.edges())


def test_points_one_slot_per_vertex(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.POINTS, _config(split=Split.NONE))
    batch = buffer.batches[0]
    assert batch.indices is None
    assert sorted(batch.vertex_ids.tolist()) == list(range(16))


# =============================================================================
# RECENTERING
# =============================================================================

def test_batches_are_centered_on_their_bounding_box(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config())
    projected = projector.project_all(tesseract.vertices)
    for batch in buffer.batches:
        lo, hi = batch.positions.min(axis=0), batch.positions.max(axis=0)
        np.testing.assert_allclose(lo + hi, 0.0, atol=1e-5)
        np.testing.assert_allclose(batch.positions + batch.offset, projected[batch.vertex_ids], atol=1e-5)


def test_cell_scale_is_capped():
    assert cell_scale(100) == MAX_CELL_SCALE
    assert cell_scale(250) == MAX_CELL_SCALE
    assert cell_scale(50) == pytest.approx(0.5)


def test_world_positions_apply_scale(tesseract, projector):
    batch = tessellate(tesseract, projector, Channel.CELLS, _config(size=50)).batches[0]
    assert batch.scale == pytest.approx(0.5)
    np.testing.assert_allclose(batch.world_positions(), batch.positions * 0.5 + batch.offset)


# =============================================================================
# COLORING
# =============================================================================

def test_cell_palette_wraps(tesseract, projector):
    palettes = {"three": [0xff0000, 0x00ff00, 0x0000ff]}
    buffer = tessellate(tesseract, projector, Channel.CELLS, _config(palette="three"), palettes)
    rgb = as_palette(palettes["three"])
    for c, batch in enumerate(buffer.batches):
        np.testing.assert_allclose(batch.colors, np.broadcast_to(rgb[c % 3], batch.colors.shape))


def test_uniform_color(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.POINTS, _config(color=ColorStrategy.UNIFORM))
    first = as_palette(PALETTES["material"])[0]
    for batch in buffer.batches:
        np.testing.assert_allclose(batch.colors, np.broadcast_to(first, batch.colors.shape), atol=1e-6)


def test_face_color_with_split_faces(tesseract, projector):
    buffer = tessellate(tesseract, projector, Channel.CELLS,
                        _config(split=Split.FACES, color=ColorStrategy.FACE))
    rgb = as_palette(PALETTES["material"])
    for f, batch in enumerate(buffer.batches):
        np.testing.assert_allclose(batch.colors[0], rgb[f % len(rgb)], atol=1e-6)


def test_w_depth_buckets(tesseract):
    palette = np.eye(3)
    sample = VertexSample(index=np.array([0, 8]), position=np.zeros((2, 3)), w=np.array([1.0, -1.0]))
    colors = w_depth_color(tesseract, 0, 0, sample, palette)
    np.testing.assert_allclose(colors[0], palette[-1])
    np.testing.assert_allclose(colors[1], palette[0])


def test_strategies_are_pure(tesseract):
    palette = as_palette(PALETTES["material"])
    sample = VertexSample(index=np.arange(4), position=np.ones((4, 3)) * 0.3, w=np.zeros(4))
    for strategy in ColorStrategy:
        first = assign_colors(strategy, tesseract, np.arange(4), np.arange(4), sample, palette)
        second = assign_colors(strategy, tesseract, np.arange(4), np.arange(4), sample, palette)
        assert first.shape == (4, 3)
        np.testing.assert_array_equal(first, second)


def test_unknown_names_raise():
    with pytest.raises(ConfigError):
        assign_colors("rainbow", None, 0, 0, VertexSample(0, np.zeros(3), 0.0), np.eye(3))
    with pytest.raises(ConfigError):
        resolve_palette(PALETTES, "no-such-palette")
    with pytest.raises(ConfigError):
        palette_from_colormap("no-such-colormap")
    with pytest.raises(ConfigError):
        as_palette([])


def test_palette_from_matplotlib():
    palette = palette_from_colormap("viridis", 5)
    assert palette.shape == (5, 3)
    assert resolve_palette({}, "viridis").shape == (8, 3)


# =============================================================================
# UPDATE PATH
# =============================================================================

@pytest.mark.parametrize("channel", list(Channel))
@pytest.mark.parametrize("color", [ColorStrategy.CELL, ColorStrategy.DEPTH])
def test_update_matches_fresh_derivation(tesseract, channel, color):
    config = _config(color=color)
    rotation = RotationState(xw=0.2)
    tessellator = Tessellator(tesseract, channel, config)
    first = tessellator.derive(Projector(rotation))

    rotation.rotate({"xw": 0.5, "yz": 0.25}, elapsed_ms=1)
    updated = tessellator.update(Projector(rotation))
    fresh = tessellate(tesseract, Projector(rotation), channel, config)

    assert updated is first
    for got, want in zip(updated.batches, fresh.batches):
        np.testing.assert_allclose(got.positions, want.positions, atol=1e-6)
        np.testing.assert_allclose(got.offset, want.offset, atol=1e-6)
        np.testing.assert_allclose(got.colors, want.colors, atol=1e-6)


def test_configure_rebuilds_only_on_topology_change(tesseract, projector):
    tessellator = Tessellator(tesseract, Channel.CELLS, _config())
    tessellator.derive(projector)
    topology = tessellator.topology

    tessellator.configure(config=_config(color=ColorStrategy.FACE, size=40))
    assert tessellator.topology is topology
    assert tessellator.buffer is None

    tessellator.configure(config=_config(reuse=Reuse.NONE))
    assert tessellator.topology is not topology
    assert tessellator.derive(projector).batches[0].n_slots == 24


def test_update_before_derive_derives(tesseract):
    buffer = Tessellator(tesseract).update(Projector(RotationState(yw=math.pi / 3)))
    assert len(buffer.batches) == 8
