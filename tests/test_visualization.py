"""
Tests for the preview bridges
=============================

Run with:
    python3 -m pytest tests/test_visualization.py -v
"""

import numpy as np
import pytest

from anakata import kernel
from anakata.config import Channel
from anakata.projection import RotationState


@pytest.fixture(scope="module")
def buffers(tesseract):
    return kernel.derive_all(tesseract, RotationState(xw=0.6), {"points": True})


def test_plotly_figure_has_trace_per_buffer(buffers):
    pytest.importorskip("plotly")
    from anakata.visualization import buffers_figure

    fig = buffers_figure(buffers.values(), title="tesseract")
    assert len(fig.data) == 3
    mesh = fig.data[0]
    assert mesh.type == "mesh3d"
    assert len(mesh.x) == buffers[Channel.CELLS].n_slots
    assert len(mesh.i) == buffers[Channel.CELLS].n_triangles


def test_plotly_positions_are_world_positions(buffers):
    pytest.importorskip("plotly")
    from anakata.visualization import buffer_trace

    trace = buffer_trace(buffers[Channel.POINTS])
    expected = np.concatenate([b.world_positions() for b in buffers[Channel.POINTS].batches])
    np.testing.assert_allclose(np.asarray(trace.x, dtype=float), expected[:, 0], atol=1e-6)


def test_threejs_group_has_object_per_batch(buffers):
    pytest.importorskip("pythreejs")
    from anakata.visualization import buffer_group

    group = buffer_group(buffers[Channel.CELLS])
    assert len(group.children) == len(buffers[Channel.CELLS].batches)
    first = group.children[0]
    assert first.scale == (buffers[Channel.CELLS].batches[0].scale,) * 3


def test_threejs_update_group(tesseract):
    pytest.importorskip("pythreejs")
    from anakata.tessellation import Tessellator
    from anakata.projection import Projector
    from anakata.visualization import buffer_group, update_group

    rotation = RotationState()
    tessellator = Tessellator(tesseract, Channel.EDGES)
    group = buffer_group(tessellator.derive(Projector(rotation)))

    rotation.rotate({"xw": 0.4})
    buffer = tessellator.update(Projector(rotation))
    update_group(group, buffer)
    np.testing.assert_allclose(
        group.children[0].geometry.attributes["position"].array,
        buffer.batches[0].positions
    )
