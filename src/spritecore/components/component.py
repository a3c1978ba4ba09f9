"""Drawable components and the manager that owns them.

A *component* is a bundle of data a system needs to carry out one behavior.
Every drawable component implements ``Transform2D`` by deriving its
translation, rotation and scaling matrices from its own ``TransformData``, so
all of them share the same composition order.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.geometry import LayerDepth
from ..core.mesh import QuadBatch
from ..core.transform import Movement2D, TransformData, TransformedDrawable
from ..errors import ComponentNotFound, MalformedSceneData
from .animation import Animation, Spritesheet, animation_uv_matrix, quad_uv_matrix

if TYPE_CHECKING:
    from .entity import EntityManager

logger = logging.getLogger(__name__)


class ComponentType(IntEnum):
    """The kinds of drawable component."""

    # A simple textured quad
    QUAD = 0
    # A quad showing frames from a spritesheet
    ANIMATION_2D = 1

    @property
    def label(self) -> str:
        return _COMPONENT_LABELS[self]

    @classmethod
    def parse(cls, value: ComponentType | int | str) -> ComponentType:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.replace("_", "").lower()
            for member in cls:
                if member.label.lower() == key:
                    return member
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise MalformedSceneData(f"Unknown component type: {value!r}")


_COMPONENT_LABELS = {
    ComponentType.QUAD: "Quad",
    ComponentType.ANIMATION_2D: "Animation2D",
}


def _layer_label(layer: LayerDepth) -> str:
    return layer.name.capitalize()


def _require(data: Any, keys: Sequence[str], what: str) -> None:
    if not isinstance(data, dict):
        raise MalformedSceneData(f"{what} must be a mapping, got {data!r}")
    missing = [key for key in keys if key not in data]
    if missing:
        raise MalformedSceneData(f"{what} is missing {', '.join(missing)}")


@dataclass
class QuadData(TransformedDrawable):
    """A plain textured quad."""

    texture_index: int
    transform_data: TransformData = field(default_factory=TransformData)
    # Pixel position in the texture shown at the quad's top-left corner
    uv_offset: list[float] = field(default_factory=lambda: [0.0, 0.0])
    layer: LayerDepth = LayerDepth.SPRITE

    component_type = ComponentType.QUAD

    def __post_init__(self) -> None:
        self.texture_index = int(self.texture_index)
        self.uv_offset = [float(v) for v in self.uv_offset]
        self.layer = LayerDepth.parse(self.layer)

    def uv_matrix(
        self,
        texture_size: Sequence[float],
        spritesheets: Sequence[Spritesheet] = (),
        now: float | None = None,
    ) -> NDArray[np.float64]:
        """Map the quad's UVs onto a texture region as large as the quad."""
        return quad_uv_matrix(self.uv_offset, self.transform_data.scaling, texture_size)

    def to_dict(self) -> dict[str, Any]:
        return {
            "texture_index": self.texture_index,
            "transform_data": self.transform_data.to_dict(),
            "uv_offset": list(self.uv_offset),
            "layer": _layer_label(self.layer),
        }

    @classmethod
    def from_dict(cls, data: Any) -> QuadData:
        _require(data, ("texture_index", "transform_data"), "Quad data")
        try:
            return cls(
                texture_index=data["texture_index"],
                transform_data=TransformData.from_dict(data["transform_data"]),
                uv_offset=data.get("uv_offset", [0.0, 0.0]),
                layer=data.get("layer", LayerDepth.SPRITE),
            )
        except MalformedSceneData:
            raise
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid Quad data: {err}") from err


@dataclass
class Animation2DData(TransformedDrawable):
    """A quad that plays animations from a spritesheet."""

    texture_index: int
    spritesheet_index: int
    animations: list[Animation]
    transform_data: TransformData = field(default_factory=TransformData)
    current_animation: int = 0
    # Lower layers have higher values
    layer: LayerDepth = LayerDepth.SPRITE
    movement: Movement2D = field(default_factory=Movement2D)
    # Monotonic time in seconds when the current animation began; never saved
    start_time: float = field(default_factory=time.monotonic, compare=False)

    component_type = ComponentType.ANIMATION_2D

    def __post_init__(self) -> None:
        self.texture_index = int(self.texture_index)
        self.spritesheet_index = int(self.spritesheet_index)
        self.current_animation = int(self.current_animation)
        self.layer = LayerDepth.parse(self.layer)
        if not self.animations:
            raise ValueError("Animation2D needs at least one animation")
        if not 0 <= self.current_animation < len(self.animations):
            raise ValueError(
                f"current_animation {self.current_animation} out of range "
                f"for {len(self.animations)} animations"
            )

    def set_animation(self, index: int, now: float | None = None) -> None:
        """Switch to another animation and restart its clock."""
        if not 0 <= index < len(self.animations):
            raise IndexError(f"No animation {index}")
        self.current_animation = index
        self.start_time = time.monotonic() if now is None else now

    def current_frame(self, now: float | None = None) -> int:
        """Spritesheet frame to show at monotonic time ``now``."""
        now = time.monotonic() if now is None else now
        elapsed_ms = max(0.0, (now - self.start_time) * 1000.0)
        return self.animations[self.current_animation].frame_at(elapsed_ms)

    def uv_matrix(
        self,
        texture_size: Sequence[float],
        spritesheets: Sequence[Spritesheet] = (),
        now: float | None = None,
    ) -> NDArray[np.float64]:
        """Map the quad's UVs onto the current frame of its spritesheet.

        Raises:
            IndexError: If ``spritesheets`` has no entry at ``spritesheet_index``
        """
        if not 0 <= self.spritesheet_index < len(spritesheets):
            raise IndexError(
                f"Animation needs spritesheet {self.spritesheet_index}, "
                f"but {len(spritesheets)} spritesheet(s) were given"
            )
        spritesheet = spritesheets[self.spritesheet_index]
        return animation_uv_matrix(spritesheet, self.current_frame(now), texture_size)

    def to_dict(self) -> dict[str, Any]:
        return {
            "texture_index": self.texture_index,
            "spritesheet_index": self.spritesheet_index,
            "layer": _layer_label(self.layer),
            "animations": [animation.to_dict() for animation in self.animations],
            "current_animation": self.current_animation,
            "transform_data": self.transform_data.to_dict(),
            "movement": self.movement.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Animation2DData:
        _require(
            data,
            ("texture_index", "spritesheet_index", "animations", "transform_data"),
            "Animation2D data",
        )
        if not isinstance(data["animations"], list):
            raise MalformedSceneData("Animation2D animations must be a list")
        try:
            return cls(
                texture_index=data["texture_index"],
                spritesheet_index=data["spritesheet_index"],
                animations=[Animation.from_dict(a) for a in data["animations"]],
                transform_data=TransformData.from_dict(data["transform_data"]),
                current_animation=data.get("current_animation", 0),
                layer=data.get("layer", LayerDepth.SPRITE),
                movement=Movement2D.from_dict(data.get("movement")),
            )
        except MalformedSceneData:
            raise
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid Animation2D data: {err}") from err


ComponentData = QuadData | Animation2DData

_DATA_CLASSES: dict[ComponentType, type[QuadData] | type[Animation2DData]] = {
    ComponentType.QUAD: QuadData,
    ComponentType.ANIMATION_2D: Animation2DData,
}


@dataclass
class Component:
    """A single data object with no behavior of its own beyond movement."""

    id: int
    component_type: ComponentType
    component_data: ComponentData

    def __post_init__(self) -> None:
        self.component_type = ComponentType.parse(self.component_type)
        if self.component_data.component_type is not self.component_type:
            raise ValueError(
                f"Component {self.id} is a {self.component_type.label} but carries "
                f"{self.component_data.component_type.label} data"
            )

    def apply_movement(self, direction: int) -> None:
        """Step an animated component's transform forward (+1) or back (-1)."""
        if isinstance(self.component_data, Animation2DData):
            data = self.component_data
            data.movement.apply(data.transform_data, direction)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "component_type": self.component_type.label,
            "component_data": self.component_data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Component:
        _require(data, ("id", "component_type", "component_data"), "Component")
        component_type = ComponentType.parse(data["component_type"])
        component_data = _DATA_CLASSES[component_type].from_dict(data["component_data"])
        try:
            return cls(
                id=int(data["id"]),
                component_type=component_type,
                component_data=component_data,
            )
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid component: {err}") from err


@dataclass
class ComponentManager:
    """Owner of all components. Controls creation, access and removal.

    Components are referred to by their ``id``, which is also their index in
    ``components``.
    """

    counter: int = 0
    components: list[Component] = field(default_factory=list)

    def create_component(
        self, component_type: ComponentType, data: ComponentData
    ) -> int:
        """Create a component and return its id."""
        component = Component(
            id=self.counter,
            component_type=component_type,
            component_data=data,
        )
        self.components.append(component)
        self.counter += 1
        logger.debug("Created %s component %d", component.component_type.label, component.id)
        return component.id

    def get_component(self, component_id: int) -> Component:
        return self.components[component_id]

    def get_components_of_type(self, component_type: ComponentType) -> list[int]:
        """Ids of every component of ``component_type``."""
        return [
            component.id
            for component in self.components
            if component.component_type == component_type
        ]

    def add_entity_component(
        self, entity_id: int, entity_manager: EntityManager, component_id: int
    ) -> None:
        """Give an entity ownership of a component."""
        entity_manager.get_entity(entity_id).components.append(component_id)

    def get_entity_components_of_type(
        self,
        entity_id: int,
        entity_manager: EntityManager,
        component_type: ComponentType,
    ) -> list[int]:
        """Ids of an entity's components that are of ``component_type``."""
        entity = entity_manager.get_entity(entity_id)
        return [
            component_id
            for component_id in entity.components
            if self.components[component_id].component_type == component_type
        ]

    def remove_entity_component(
        self, entity_id: int, entity_manager: EntityManager, component_id: int
    ) -> None:
        """Take a component away from an entity.

        Raises:
            ComponentNotFound: If the entity does not own the component
        """
        components = entity_manager.get_entity(entity_id).components
        if component_id not in components:
            raise ComponentNotFound(
                f"Entity {entity_id} has no component {component_id}"
            )
        components.remove(component_id)

    def apply_movement(self, direction: int) -> None:
        """Step every movable component forward (+1) or back (-1)."""
        for component in self.components:
            component.apply_movement(direction)

    def build_batch(
        self,
        texture_sizes: Mapping[int, Sequence[float]] | None = None,
        spritesheets: Sequence[Spritesheet] = (),
        now: float | None = None,
    ) -> QuadBatch:
        """Queue every component in a ``QuadBatch``.

        Args:
            texture_sizes: Pixel size per texture index; components whose
                texture size is unknown use the plain quad UVs
            spritesheets: Spritesheets referenced by animated components
            now: Monotonic time used to pick animation frames
        """
        texture_sizes = texture_sizes or {}
        batch = QuadBatch()
        for component in self.components:
            data = component.component_data
            texture_size = texture_sizes.get(data.texture_index)
            uv_matrix = (
                data.uv_matrix(texture_size, spritesheets, now)
                if texture_size is not None
                else None
            )
            batch.add(
                data,
                layer=data.layer,
                texture_index=data.texture_index,
                uv_matrix=uv_matrix,
            )
        return batch

    def to_dict(self) -> dict[str, Any]:
        return {
            "counter": self.counter,
            "components": [component.to_dict() for component in self.components],
        }
