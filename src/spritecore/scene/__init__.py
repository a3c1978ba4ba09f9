"""Scene files: loading and saving components, entities and spritesheets."""

from .loader import Scene, SceneLoader

__all__ = ["Scene", "SceneLoader"]
