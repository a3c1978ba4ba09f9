"""Spritecore - 2D transforms and quad geometry for sprite rendering."""

from .config import Configuration
from .core import (
    QUAD_INDICES,
    QUAD_UVS,
    QUAD_VERTICES,
    VERTEX_DTYPE,
    LayerDepth,
    QuadBatch,
    Transform2D,
    TransformData,
    VertexData,
    projection_matrix,
)
from .errors import ComponentNotFound, MalformedSceneData, SpriteCoreError
from .scene import Scene, SceneLoader

__all__ = [
    "Configuration",
    "QUAD_INDICES",
    "QUAD_UVS",
    "QUAD_VERTICES",
    "VERTEX_DTYPE",
    "LayerDepth",
    "QuadBatch",
    "Transform2D",
    "TransformData",
    "VertexData",
    "projection_matrix",
    "ComponentNotFound",
    "MalformedSceneData",
    "SpriteCoreError",
    "Scene",
    "SceneLoader",
]
