"""Tests for loading and saving YAML scene files."""

from pathlib import Path

import pytest

from spritecore.components import ComponentType, EntityType
from spritecore.core.geometry import LayerDepth
from spritecore.errors import MalformedSceneData
from spritecore.scene import Scene, SceneLoader

DEMO_SCENE = Path(__file__).parent.parent / "assets" / "scenes" / "demo.yaml"

MINIMAL_SCENE = """
components:
  - id: 0
    component_type: Quad
    component_data:
      texture_index: 0
      transform_data: {translation: [100, 50], scaling: [2, 2], rotation: 0}
entities:
  - id: 0
    entity_type: Sprite
    components: [0]
"""


@pytest.fixture
def loader():
    return SceneLoader()


def test_demo_scene_loads(loader):
    scene = loader.load(DEMO_SCENE)

    components = scene.component_manager
    assert components.counter == 2
    assert components.get_components_of_type(ComponentType.QUAD) == [0]
    assert components.get_components_of_type(ComponentType.ANIMATION_2D) == [1]
    assert components.get_component(0).component_data.layer is LayerDepth.BACKGROUND
    assert scene.entity_manager.get_entities_of_type(EntityType.SPRITE) == [1]
    assert len(scene.spritesheets) == 1


def test_minimal_scene_defaults(loader):
    scene = loader.load_string(MINIMAL_SCENE)
    quad = scene.component_manager.get_component(0).component_data
    assert quad.transform_data.translation == [100.0, 50.0]
    assert quad.layer is LayerDepth.SPRITE
    assert quad.uv_offset == [0.0, 0.0]
    assert scene.spritesheets == []


def test_empty_document_is_an_empty_scene(loader):
    scene = loader.load_string("")
    assert scene.component_manager.components == []
    assert scene.entity_manager.entities == []


def test_dump_and_reload_round_trip(loader, tmp_path):
    """Saving a loaded scene and loading it again gives the same scene."""
    scene = loader.load(DEMO_SCENE)
    scene.component_manager.apply_movement(1)

    path = tmp_path / "saved.yaml"
    loader.save(scene, path)
    restored = loader.load(path)

    assert restored.component_manager == scene.component_manager
    assert restored.entity_manager == scene.entity_manager
    assert restored.spritesheets == scene.spritesheets


def test_dump_uses_readable_names(loader):
    text = loader.dump(loader.load_string(MINIMAL_SCENE))
    assert "component_type: Quad" in text
    assert "entity_type: Sprite" in text
    assert "layer: Sprite" in text


def test_missing_file(loader, tmp_path):
    with pytest.raises(FileNotFoundError):
        loader.load(tmp_path / "nope.yaml")


@pytest.mark.parametrize("text", [
    "components: [",
    "- just\n- a\n- list\n",
    "components: {id: 0}",
    "components:\n  - id: 0\n    component_type: Quad\n",
    "components:\n  - id: 0\n    component_type: Triangle\n    component_data: {}\n",
    MINIMAL_SCENE.replace("[100, 50]", "[100, 50, 7]"),
    MINIMAL_SCENE.replace("rotation: 0", "rotation: sideways"),
    MINIMAL_SCENE.replace("components: [0]", "components: [3]"),
    MINIMAL_SCENE.replace("entity_type: Sprite", "entity_type: Tile"),
    MINIMAL_SCENE.replace("  - id: 0\n    component_type", "  - id: 5\n    component_type"),
    MINIMAL_SCENE.replace("texture_index: 0\n", "texture_index: 0\n      layer: Foreground\n"),
])
def test_malformed_scene_data(loader, text):
    """Malformed input surfaces as MalformedSceneData instead of being ignored."""
    with pytest.raises(MalformedSceneData):
        loader.load_string(text)


def test_unknown_spritesheet_reference(loader):
    text = """
components:
  - id: 0
    component_type: Animation2D
    component_data:
      texture_index: 0
      spritesheet_index: 2
      animations: [{frames: [0, 1], frame_length: 100}]
      transform_data: {translation: [0, 0], scaling: [1, 1], rotation: 0}
"""
    with pytest.raises(MalformedSceneData):
        loader.load_string(text)


def test_malformed_is_a_value_error(loader):
    with pytest.raises(ValueError):
        loader.load_string("components: 3")


def test_scene_defaults():
    scene = Scene()
    assert scene.component_manager.counter == 0
    assert scene.entity_manager.counter == 0
