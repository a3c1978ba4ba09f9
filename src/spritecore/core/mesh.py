"""Vertex and index buffers for batches of quads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .geometry import QUAD_INDICES, QUAD_UVS, QUAD_VERTICES, LayerDepth
from .transform import Transform2D
from .vertex import VERTEX_DTYPE, WHITE, VertexData, pack_vertices

logger = logging.getLogger(__name__)

# Largest vertex index a uint16 index buffer can address.
MAX_QUADS = (np.iinfo(np.uint16).max + 1) // len(QUAD_VERTICES)


def quad_positions(
    drawable: Transform2D,
    projection: NDArray[np.floating],
    layer: LayerDepth | int = LayerDepth.SPRITE,
) -> NDArray[np.float32]:
    """Clip-space positions of a drawable's four corners.

    Each corner is moved to world space by the drawable's model matrix, given
    the layer depth as its z coordinate, and projected.

    Args:
        drawable: Anything implementing ``Transform2D``
        projection: 4x4 projection matrix
        layer: Depth of the quad's layer

    Returns:
        4x3 array of clip-space (x, y, z) positions
    """
    model = drawable.transformation_matrix()
    ones = np.ones((len(QUAD_VERTICES), 1))
    local = np.hstack([QUAD_VERTICES.astype(np.float64), ones])
    world = (model @ local.T).T

    homogeneous = np.empty((len(world), 4), dtype=np.float64)
    homogeneous[:, :2] = world[:, :2]
    homogeneous[:, 2] = float(layer)
    homogeneous[:, 3] = 1.0
    clip = (np.asarray(projection, dtype=np.float64) @ homogeneous.T).T
    return clip[:, :3].astype(np.float32)


def quad_uvs(uv_matrix: NDArray[np.floating] | None = None) -> NDArray[np.float32]:
    """Texture coordinates of a quad's corners mapped through ``uv_matrix``."""
    if uv_matrix is None:
        return QUAD_UVS[:, :2].copy()
    mapped = (np.asarray(uv_matrix, dtype=np.float64) @ QUAD_UVS.T.astype(np.float64)).T
    return mapped[:, :2].astype(np.float32)


def quad_vertex_data(
    drawable: Transform2D,
    projection: NDArray[np.floating],
    color: Sequence[float] = WHITE,
    texture_index: int = 0,
    layer: LayerDepth | int = LayerDepth.SPRITE,
    uv_matrix: NDArray[np.floating] | None = None,
) -> list[VertexData]:
    """Build the four vertices of one drawable quad."""
    positions = quad_positions(drawable, projection, layer)
    uvs = quad_uvs(uv_matrix)
    return [
        VertexData(
            position=positions[i],
            uv=uvs[i],
            color=color,
            texture_index=texture_index,
        )
        for i in range(len(QUAD_VERTICES))
    ]


@dataclass
class QuadInstance:
    """One drawable queued in a batch, with its per-instance vertex inputs."""

    drawable: Transform2D
    layer: LayerDepth = LayerDepth.SPRITE
    color: tuple[float, float, float, float] = WHITE
    texture_index: int = 0
    uv_matrix: NDArray[np.float64] | None = None


class QuadBatch:
    """Collects drawables and produces merged vertex/index buffers.

    Quads are emitted back-to-front: backgrounds before sprites. Quads on the
    same layer keep their insertion order.
    """

    def __init__(self) -> None:
        self._instances: list[QuadInstance] = []

    def add(
        self,
        drawable: Transform2D,
        layer: LayerDepth | int = LayerDepth.SPRITE,
        color: Sequence[float] = WHITE,
        texture_index: int = 0,
        uv_matrix: NDArray[np.floating] | None = None,
    ) -> QuadInstance:
        """Queue a drawable.

        Returns:
            The queued instance
        """
        if len(self._instances) >= MAX_QUADS:
            raise ValueError(f"A batch holds at most {MAX_QUADS} quads")
        instance = QuadInstance(
            drawable=drawable,
            layer=LayerDepth.parse(layer),
            color=tuple(float(c) for c in color),
            texture_index=int(texture_index),
            uv_matrix=uv_matrix,
        )
        self._instances.append(instance)
        return instance

    def __len__(self) -> int:
        return len(self._instances)

    @property
    def instances(self) -> list[QuadInstance]:
        """Queued instances in draw order."""
        return sorted(self._instances, key=lambda inst: -int(inst.layer))

    def build(
        self, projection: NDArray[np.floating]
    ) -> tuple[NDArray[np.void], NDArray[np.uint16]]:
        """Build the vertex and index buffers for every queued quad.

        Args:
            projection: 4x4 projection matrix

        Returns:
            Tuple of (``VERTEX_DTYPE`` vertex array, uint16 index array)
        """
        if not self._instances:
            return np.empty(0, dtype=VERTEX_DTYPE), np.empty(0, dtype=np.uint16)

        vertices: list[VertexData] = []
        all_indices = []
        vertex_offset = 0

        for instance in self.instances:
            vertices.extend(quad_vertex_data(
                instance.drawable,
                projection,
                color=instance.color,
                texture_index=instance.texture_index,
                layer=instance.layer,
                uv_matrix=instance.uv_matrix,
            ))
            all_indices.append(QUAD_INDICES.astype(np.uint32) + vertex_offset)
            vertex_offset += len(QUAD_VERTICES)

        logger.debug("Built batch of %d quads", len(self._instances))
        return pack_vertices(vertices), np.concatenate(all_indices).astype(np.uint16)
