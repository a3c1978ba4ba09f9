"""Entities: bundles of components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from ..errors import MalformedSceneData

logger = logging.getLogger(__name__)


class EntityType(IntEnum):
    BACKGROUND = 0
    SPRITE = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: EntityType | int | str) -> EntityType:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise MalformedSceneData(f"Unknown entity type: {value!r}")


@dataclass
class Entity:
    """An entity is just a bundle of component ids."""

    id: int
    entity_type: EntityType
    components: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entity_type": self.entity_type.label,
            "components": list(self.components),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Entity:
        if not isinstance(data, dict) or "id" not in data or "entity_type" not in data:
            raise MalformedSceneData(f"Invalid entity: {data!r}")
        components = data.get("components", [])
        if not isinstance(components, list):
            raise MalformedSceneData(f"Entity {data['id']} components must be a list")
        try:
            return cls(
                id=int(data["id"]),
                entity_type=EntityType.parse(data["entity_type"]),
                components=[int(c) for c in components],
            )
        except MalformedSceneData:
            raise
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid entity: {err}") from err


@dataclass
class EntityManager:
    """Owner of all entities. Handles creation and access."""

    counter: int = 0
    entities: list[Entity] = field(default_factory=list)

    def create_entity(self, entity_type: EntityType) -> int:
        """Create an empty entity and return its id."""
        entity = Entity(id=self.counter, entity_type=EntityType.parse(entity_type))
        self.entities.append(entity)
        self.counter += 1
        logger.debug("Created %s entity %d", entity.entity_type.label, entity.id)
        return entity.id

    def get_entity(self, entity_id: int) -> Entity:
        return self.entities[entity_id]

    def get_entities_of_type(self, entity_type: EntityType) -> list[int]:
        return [
            entity.id for entity in self.entities if entity.entity_type == entity_type
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "counter": self.counter,
            "entities": [entity.to_dict() for entity in self.entities],
        }
