"""Tests for vertex data packing and quad batching."""

import math

import numpy as np
import pytest

from spritecore.core.geometry import QUAD_INDICES, QUAD_UVS, LayerDepth, projection_matrix
from spritecore.core.mesh import (
    MAX_QUADS,
    QuadBatch,
    quad_positions,
    quad_uvs,
    quad_vertex_data,
)
from spritecore.core.transform import Transform2D, TransformData, TransformedDrawable
from spritecore.core.vertex import VERTEX_DTYPE, WHITE, VertexData, pack_vertices


class Drawable(TransformedDrawable):
    def __init__(self, translation=(0.0, 0.0), scaling=(1.0, 1.0), rotation=0.0):
        self.transform_data = TransformData.new(translation, scaling, rotation)


@pytest.fixture
def projection():
    return projection_matrix((800, 600))


def test_vertex_dtype_field_layout():
    """Field order and types match the pipeline's vertex input layout."""
    assert VERTEX_DTYPE.names == ("position", "uv", "color", "texture_index")
    assert VERTEX_DTYPE["position"].shape == (3,)
    assert VERTEX_DTYPE["uv"].shape == (2,)
    assert VERTEX_DTYPE["color"].shape == (4,)
    assert VERTEX_DTYPE["position"].base == np.float32
    assert VERTEX_DTYPE["texture_index"] == np.uint32
    assert VERTEX_DTYPE.itemsize == (3 + 2 + 4) * 4 + 4


def test_vertex_data_defaults_and_packing():
    vertex = VertexData(position=(1, 2, 0), uv=(0.5, 0.25), texture_index=3)
    assert vertex.color == WHITE
    packed = pack_vertices([vertex, vertex])
    assert packed.dtype == VERTEX_DTYPE
    assert len(packed) == 2
    np.testing.assert_array_equal(packed["position"][1], [1.0, 2.0, 0.0])
    np.testing.assert_array_equal(packed["texture_index"], [3, 3])


def test_identity_drawable_positions(projection):
    """An untransformed quad is one pixel wide around the view center."""
    positions = quad_positions(Transform2D(), projection)
    assert positions.shape == (4, 3)
    assert positions[0] == pytest.approx([-0.5 / 400, 0.5 / 300, 0.0])
    assert positions[2] == pytest.approx([0.5 / 400, -0.5 / 300, 0.0])


def test_fullscreen_background_fills_clip_space(projection):
    """A background scaled to the viewport spans clip space at depth 1."""
    positions = quad_positions(Drawable(scaling=(800, 600)), projection, LayerDepth.BACKGROUND)
    expected = [[-1, 1, 1], [-1, -1, 1], [1, -1, 1], [1, 1, 1]]
    np.testing.assert_allclose(positions, expected, atol=1e-6)


def test_layer_only_changes_depth(projection):
    drawable = Drawable(translation=(30, -20), scaling=(16, 16), rotation=0.4)
    sprite = quad_positions(drawable, projection, LayerDepth.SPRITE)
    background = quad_positions(drawable, projection, LayerDepth.BACKGROUND)
    np.testing.assert_allclose(sprite[:, :2], background[:, :2])
    np.testing.assert_array_equal(sprite[:, 2], [0, 0, 0, 0])
    np.testing.assert_array_equal(background[:, 2], [1, 1, 1, 1])


def test_quad_uvs_without_mapping_are_the_table():
    np.testing.assert_array_equal(quad_uvs(), QUAD_UVS[:, :2])


def test_quad_uvs_with_mapping():
    """A UV matrix halves and offsets the corners."""
    mapping = np.array([
        [0.5, 0.0, 0.25],
        [0.0, 0.5, 0.0],
        [0.0, 0.0, 1.0],
    ])
    uvs = quad_uvs(mapping)
    np.testing.assert_allclose(uvs, [[0.25, 0.0], [0.25, 0.5], [0.75, 0.5], [0.75, 0.0]])


def test_quad_vertex_data_carries_per_instance_fields(projection):
    vertices = quad_vertex_data(
        Drawable(translation=(100, 50), scaling=(2, 2)),
        projection,
        color=(1.0, 0.0, 0.0, 0.5),
        texture_index=7,
    )
    assert len(vertices) == 4
    assert all(v.texture_index == 7 for v in vertices)
    assert all(v.color == (1.0, 0.0, 0.0, 0.5) for v in vertices)
    assert vertices[0].position[0] == pytest.approx(99 / 400)
    assert vertices[0].position[1] == pytest.approx(51 / 300)


def test_empty_batch(projection):
    vertices, indices = QuadBatch().build(projection)
    assert len(vertices) == 0
    assert vertices.dtype == VERTEX_DTYPE
    assert len(indices) == 0
    assert indices.dtype == np.uint16


def test_batch_offsets_indices_per_quad(projection):
    batch = QuadBatch()
    batch.add(Drawable())
    batch.add(Drawable(translation=(10, 0)))
    batch.add(Drawable(translation=(20, 0)))
    vertices, indices = batch.build(projection)

    assert len(batch) == 3
    assert len(vertices) == 12
    assert indices.dtype == np.uint16
    expected = np.concatenate([QUAD_INDICES + 4 * i for i in range(3)])
    np.testing.assert_array_equal(indices, expected)
    assert indices.max() < len(vertices)


def test_batch_draws_backgrounds_first(projection):
    """Backgrounds come before sprites; same-layer quads keep their order."""
    batch = QuadBatch()
    batch.add(Drawable(translation=(1, 0)), layer=LayerDepth.SPRITE, texture_index=1)
    batch.add(Drawable(translation=(2, 0)), layer=LayerDepth.BACKGROUND, texture_index=2)
    batch.add(Drawable(translation=(3, 0)), layer="Sprite", texture_index=3)
    vertices, _ = batch.build(projection)

    order = vertices["texture_index"][::4].tolist()
    assert order == [2, 1, 3]


def test_batch_applies_uv_matrix(projection):
    batch = QuadBatch()
    batch.add(Drawable(), uv_matrix=np.diag([0.5, 0.5, 1.0]))
    vertices, _ = batch.build(projection)
    np.testing.assert_allclose(vertices["uv"][2], [0.5, 0.5])


def test_batch_size_limit():
    """A uint16 index buffer addresses at most MAX_QUADS quads."""
    assert MAX_QUADS * 4 - 1 == np.iinfo(np.uint16).max
    batch = QuadBatch()
    drawable = Transform2D()
    for _ in range(MAX_QUADS):
        batch.add(drawable)
    with pytest.raises(ValueError):
        batch.add(drawable)


def test_rotated_quad_keeps_side_length(projection):
    """Rotation does not change the size of the quad in world units."""
    drawable = Drawable(scaling=(10, 10), rotation=math.pi / 6)
    clip = quad_positions(drawable, projection)
    world = clip[:, :2] * np.array([400.0, 300.0])
    side = np.linalg.norm(world[0] - world[1])
    assert side == pytest.approx(10.0, rel=1e-5)
