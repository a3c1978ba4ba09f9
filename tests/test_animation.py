"""Tests for animation frame selection and spritesheet UV mapping."""

import numpy as np
import pytest

from spritecore.components.animation import (
    Animation,
    AnimationType,
    Spritesheet,
    animation_uv_matrix,
    calculate_frame,
    normalization_matrix,
    quad_uv_matrix,
)
from spritecore.core.mesh import quad_uvs
from spritecore.errors import MalformedSceneData


@pytest.mark.parametrize("elapsed,expected", [
    (0, 0), (99, 0), (100, 1), (250, 2), (300, 0), (1050, 1),
])
def test_loop_repeats(elapsed, expected):
    assert calculate_frame(elapsed, 3, 100, AnimationType.LOOP) == expected


def test_bounce_goes_back_and_forth():
    """1 2 3 2 1 2 3 ..."""
    frames = [calculate_frame(step * 100, 3, 100, AnimationType.BOUNCE) for step in range(8)]
    assert frames == [0, 1, 2, 1, 0, 1, 2, 1]


def test_once_holds_last_frame():
    frames = [calculate_frame(step * 100, 3, 100, AnimationType.ONCE) for step in range(6)]
    assert frames == [0, 1, 2, 2, 2, 2]


@pytest.mark.parametrize("animation_type", list(AnimationType))
def test_single_frame_clip(animation_type):
    assert calculate_frame(12345, 1, 10, animation_type) == 0


@pytest.mark.parametrize("value,expected", [
    ("Loop", AnimationType.LOOP),
    ("bounce", AnimationType.BOUNCE),
    ("ONCE", AnimationType.ONCE),
    (AnimationType.LOOP, AnimationType.LOOP),
])
def test_animation_type_parse(value, expected):
    assert AnimationType.parse(value) is expected


def test_animation_type_parse_unknown():
    with pytest.raises(MalformedSceneData):
        AnimationType.parse("PingPong")


def test_animation_frame_at_maps_to_sheet_frames():
    animation = Animation(frames=[4, 5, 6], animation_type="Bounce", frame_length=50)
    assert [animation.frame_at(t) for t in (0, 50, 100, 150, 200)] == [4, 5, 6, 5, 4]


@pytest.mark.parametrize("kwargs", [
    {"frames": []},
    {"frames": [0], "frame_length": 0},
])
def test_animation_rejects_bad_clips(kwargs):
    with pytest.raises(ValueError):
        Animation(**kwargs)


def test_animation_dict_round_trip():
    animation = Animation(frames=[1, 2], animation_type=AnimationType.ONCE, frame_length=80)
    assert Animation.from_dict(animation.to_dict()) == animation
    assert animation.to_dict()["animation_type"] == "Once"


@pytest.mark.parametrize("payload", [None, {"frame_length": 10}, {"frames": [], "frame_length": 10}])
def test_animation_from_bad_dict(payload):
    with pytest.raises(MalformedSceneData):
        Animation.from_dict(payload)


def test_spritesheet_frame_origin_is_row_major():
    sheet = Spritesheet(index=0, pitch=4, size=[128, 64], frame_size=[32, 32])
    np.testing.assert_array_equal(sheet.frame_origin(0), [0, 0])
    np.testing.assert_array_equal(sheet.frame_origin(3), [96, 0])
    np.testing.assert_array_equal(sheet.frame_origin(5), [32, 32])


def test_spritesheet_requires_positive_pitch():
    with pytest.raises(MalformedSceneData):
        Spritesheet.from_dict({"index": 0, "pitch": 0})


def test_normalization_matrix():
    uv = normalization_matrix((128, 64)) @ np.array([64.0, 32.0, 1.0])
    np.testing.assert_allclose(uv[:2], [0.5, 0.5])


def test_quad_uv_matrix_selects_region():
    """A 32x32 region at (32, 0) of a 128x64 texture."""
    uvs = quad_uvs(quad_uv_matrix((32, 0), (32, 32), (128, 64)))
    np.testing.assert_allclose(uvs[0], [0.25, 0.0])
    np.testing.assert_allclose(uvs[2], [0.5, 0.5])


def test_animation_uv_matrix_selects_frame():
    sheet = Spritesheet(index=0, pitch=4, size=[128, 64], frame_size=[32, 32])
    uvs = quad_uvs(animation_uv_matrix(sheet, 5, (128, 64)))
    np.testing.assert_allclose(uvs[0], [0.25, 0.5])
    np.testing.assert_allclose(uvs[2], [0.5, 1.0])


def test_animation_uv_matrix_honors_sheet_position():
    sheet = Spritesheet(index=0, pitch=2, position=[0, 32], size=[64, 32], frame_size=[32, 32])
    uvs = quad_uvs(animation_uv_matrix(sheet, 1, (64, 64)))
    np.testing.assert_allclose(uvs[0], [0.5, 0.5])
    np.testing.assert_allclose(uvs[2], [1.0, 1.0])
