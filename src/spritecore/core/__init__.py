"""Core quad geometry, transforms and projection."""

from .geometry import (
    QUAD_INDICES,
    QUAD_UVS,
    QUAD_VERTICES,
    LayerDepth,
    projection_matrix,
)
from .mesh import QuadBatch, quad_vertex_data
from .transform import Movement2D, Transform2D, TransformData, TransformedDrawable
from .vertex import VERTEX_DTYPE, VertexData
from . import geometry

__all__ = [
    "QUAD_INDICES",
    "QUAD_UVS",
    "QUAD_VERTICES",
    "LayerDepth",
    "projection_matrix",
    "QuadBatch",
    "quad_vertex_data",
    "Movement2D",
    "Transform2D",
    "TransformData",
    "TransformedDrawable",
    "VERTEX_DTYPE",
    "VertexData",
    "geometry",
]
