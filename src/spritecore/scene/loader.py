"""YAML loader for scene files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..components.animation import Spritesheet
from ..components.component import Component, ComponentManager
from ..components.entity import Entity, EntityManager
from ..errors import MalformedSceneData

logger = logging.getLogger(__name__)


@dataclass
class Scene:
    """Everything loaded from one scene file."""

    component_manager: ComponentManager = field(default_factory=ComponentManager)
    entity_manager: EntityManager = field(default_factory=EntityManager)
    spritesheets: list[Spritesheet] = field(default_factory=list)


class SceneLoader:
    """Loads and saves scenes as YAML.

    YAML format:
    ```yaml
    spritesheets:
      - index: 0
        pitch: 4
        position: [0, 0]
        size: [128, 64]
        frame_size: [32, 32]

    components:
      - id: 0
        component_type: Quad
        component_data:
          texture_index: 1
          transform_data: {translation: [0, 0], scaling: [800, 600], rotation: 0}
          uv_offset: [0, 0]
          layer: Background
      - id: 1
        component_type: Animation2D
        component_data:
          texture_index: 0
          spritesheet_index: 0
          layer: Sprite
          animations:
            - {frames: [0, 1, 2, 3], animation_type: Loop, frame_length: 100}
          current_animation: 0
          transform_data: {translation: [100, 50], scaling: [32, 32], rotation: 0}
          movement: {delta_translate: [4, 0], delta_rotation: 0, delta_scale: [0, 0]}

    entities:
      - id: 0
        entity_type: Background
        components: [0]
    ```

    Component and entity ids must match their position in their list.
    """

    def load(self, path: str | Path) -> Scene:
        """Load a scene from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            The loaded scene

        Raises:
            FileNotFoundError: If the file does not exist
            MalformedSceneData: If the YAML or its contents are invalid
        """
        path = Path(path)
        logger.debug("Loading scene from %s", path)
        with open(path) as f:
            text = f.read()
        return self.load_string(text)

    def load_string(self, yaml_string: str) -> Scene:
        """Load a scene from a YAML string."""
        try:
            data = yaml.safe_load(yaml_string)
        except yaml.YAMLError as err:
            raise MalformedSceneData(f"Scene is not valid YAML: {err}") from err
        return self._build_scene(data)

    def dump(self, scene: Scene) -> str:
        """Serialize a scene to a YAML string."""
        data = {
            "spritesheets": [sheet.to_dict() for sheet in scene.spritesheets],
            "components": [
                component.to_dict()
                for component in scene.component_manager.components
            ],
            "entities": [entity.to_dict() for entity in scene.entity_manager.entities],
        }
        return yaml.safe_dump(data, sort_keys=False)

    def save(self, scene: Scene, path: str | Path) -> None:
        """Write a scene to a YAML file."""
        path = Path(path)
        logger.debug("Saving scene to %s", path)
        with open(path, "w") as f:
            f.write(self.dump(scene))

    def _build_scene(self, data: Any) -> Scene:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MalformedSceneData("Scene must be a mapping at the top level")

        logger.debug("Loading spritesheets...")
        spritesheets = [
            Spritesheet.from_dict(item) for item in self._section(data, "spritesheets")
        ]

        logger.debug("Loading components...")
        components = [
            Component.from_dict(item) for item in self._section(data, "components")
        ]
        self._check_ids(components, "component")

        logger.debug("Loading entities...")
        entities = [Entity.from_dict(item) for item in self._section(data, "entities")]
        self._check_ids(entities, "entity")

        for entity in entities:
            for component_id in entity.components:
                if not 0 <= component_id < len(components):
                    raise MalformedSceneData(
                        f"Entity {entity.id} refers to unknown component {component_id}"
                    )

        for component in components:
            spritesheet_index = getattr(component.component_data, "spritesheet_index", None)
            if spritesheet_index is not None and not 0 <= spritesheet_index < len(spritesheets):
                raise MalformedSceneData(
                    f"Component {component.id} refers to unknown "
                    f"spritesheet {spritesheet_index}"
                )

        scene = Scene(
            component_manager=ComponentManager(
                counter=len(components), components=components
            ),
            entity_manager=EntityManager(counter=len(entities), entities=entities),
            spritesheets=spritesheets,
        )
        logger.debug(
            "Loaded %d components, %d entities, %d spritesheets",
            len(components),
            len(entities),
            len(spritesheets),
        )
        return scene

    @staticmethod
    def _section(data: dict[str, Any], key: str) -> list[Any]:
        section = data.get(key)
        if section is None:
            return []
        if not isinstance(section, list):
            raise MalformedSceneData(f"'{key}' must be a list")
        return section

    @staticmethod
    def _check_ids(items: list[Component] | list[Entity], kind: str) -> None:
        for position, item in enumerate(items):
            if item.id != position:
                raise MalformedSceneData(
                    f"{kind.capitalize()} id {item.id} does not match its position {position}"
                )
