"""Quad geometry tables, layer depths and the orthographic projection.

Every drawable quad shares the same vertex, UV and index tables. Per-instance
differences come from the model matrix, vertex color and texture index that
are layered on top when a vertex buffer is built.

Conventions:

- Matrices use column vectors: ``clip = projection @ [x, y, z, 1]``
- +X is right and +Y is up; both quad triangles wind counter-clockwise in
  that plane, so ``(B-A) x (C-A)`` has a positive z component
"""

from __future__ import annotations

from enum import IntEnum
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import MalformedSceneData


def _frozen(array: NDArray) -> NDArray:
    array.flags.writeable = False
    return array


# Unit square centered on the origin, which keeps rotation about the
# quad's own center a plain rotation matrix.
QUAD_VERTICES: NDArray[np.float32] = _frozen(np.array([
    [-0.5, 0.5],   # top-left
    [-0.5, -0.5],  # bottom-left
    [0.5, -0.5],   # bottom-right
    [0.5, 0.5],    # top-right
], dtype=np.float32))

# Texture coordinates that make a texture fit a quad exactly.
# The third component is carried through the 3x3 UV mapping as given.
QUAD_UVS: NDArray[np.float32] = _frozen(np.array([
    [0.0, 0.0, 1.0],  # top-left
    [0.0, 1.0, 1.0],  # bottom-left
    [1.0, 1.0, 1.0],  # bottom-right
    [1.0, 0.0, 1.0],  # top-right
], dtype=np.float32))

# Two triangles sharing the 2-0 diagonal.
QUAD_INDICES: NDArray[np.uint16] = _frozen(
    np.array([0, 1, 2, 2, 3, 0], dtype=np.uint16)
)


class LayerDepth(IntEnum):
    """The z coordinate for each layer of quads.

    Larger values are further away from the camera. Because the projection is
    orthographic the depth never changes a quad's size; it only makes sure
    sprites are drawn on top of backgrounds.
    """

    SPRITE = 0
    BACKGROUND = 1

    @classmethod
    def parse(cls, value: LayerDepth | int | str) -> LayerDepth:
        """Resolve a layer from an enum member, its value, or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise MalformedSceneData(f"Unknown layer: {value!r}") from None
        if isinstance(value, bool):
            raise MalformedSceneData(f"Unknown layer: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise MalformedSceneData(f"Unknown layer: {value!r}") from None


def projection_matrix(viewport_size: Sequence[float] | NDArray) -> NDArray[np.float32]:
    """Build the orthographic projection for a viewport.

    The view is centered on the origin and spans ``[-w/2, w/2]`` by
    ``[-h/2, h/2]`` with a ``[0, 1]`` depth range (left-handed, zero-to-one
    clip depth). At default scale one world unit covers one physical pixel.

    Args:
        viewport_size: (width, height) in physical pixels, both positive

    Returns:
        4x4 projection matrix
    """
    width, height = float(viewport_size[0]), float(viewport_size[1])
    left, right = -width / 2.0, width / 2.0
    bottom, top = -height / 2.0, height / 2.0
    near, far = 0.0, 1.0

    mat = np.zeros((4, 4), dtype=np.float32)
    mat[0, 0] = 2.0 / (right - left)
    mat[1, 1] = 2.0 / (top - bottom)
    mat[2, 2] = 1.0 / (far - near)
    mat[0, 3] = -(right + left) / (right - left)
    mat[1, 3] = -(top + bottom) / (top - bottom)
    mat[2, 3] = -near / (far - near)
    mat[3, 3] = 1.0
    return mat


def triangle_signed_area(
    a: NDArray[np.floating],
    b: NDArray[np.floating],
    c: NDArray[np.floating],
) -> float:
    """Signed area of a 2D triangle; positive for counter-clockwise winding."""
    edge1 = np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)
    edge2 = np.asarray(c, dtype=np.float64) - np.asarray(a, dtype=np.float64)
    return 0.5 * float(edge1[0] * edge2[1] - edge1[1] * edge2[0])


def verify_quad_winding(
    vertices: NDArray[np.floating] = QUAD_VERTICES,
    indices: NDArray[np.integer] = QUAD_INDICES,
) -> tuple[bool, list[int]]:
    """Check that an index table forms a valid quad from its vertices.

    Every triangle must be non-degenerate and wound the same way as the
    first one, and the triangles together must cover the area of the
    vertices' bounding box.

    Args:
        vertices: Nx2 vertex positions
        indices: Flat triangle-list indices

    Returns:
        Tuple of (all_valid, list_of_bad_triangle_indices)
    """
    indices = np.asarray(indices)
    if len(indices) == 0 or len(indices) % 3 != 0:
        return False, []
    if indices.min() < 0 or indices.max() >= len(vertices):
        return False, []

    bad_triangles = []
    total_area = 0.0
    reference_sign = 0.0

    for i, (ia, ib, ic) in enumerate(indices.reshape(-1, 3)):
        area = triangle_signed_area(vertices[ia], vertices[ib], vertices[ic])
        if abs(area) < 1e-10:
            bad_triangles.append(i)
            continue
        if reference_sign == 0.0:
            reference_sign = np.sign(area)
        elif np.sign(area) != reference_sign:
            bad_triangles.append(i)
            continue
        total_area += abs(area)

    extent = np.ptp(np.asarray(vertices, dtype=np.float64), axis=0)
    covers = bool(np.isclose(total_area, extent[0] * extent[1]))
    return covers and not bad_triangles, bad_triangles
