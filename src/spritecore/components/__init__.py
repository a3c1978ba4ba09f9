"""Drawable components, entities and spritesheet animation."""

from .animation import Animation, AnimationType, Spritesheet, calculate_frame
from .component import (
    Animation2DData,
    Component,
    ComponentManager,
    ComponentType,
    QuadData,
)
from .entity import Entity, EntityManager, EntityType

__all__ = [
    "Animation",
    "AnimationType",
    "Spritesheet",
    "calculate_frame",
    "Animation2DData",
    "Component",
    "ComponentManager",
    "ComponentType",
    "QuadData",
    "Entity",
    "EntityManager",
    "EntityType",
]
