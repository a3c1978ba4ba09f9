"""Per-vertex data and its packed buffer layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

# Field order and types must match the pipeline's vertex input layout.
VERTEX_DTYPE = np.dtype([
    ("position", np.float32, (3,)),
    ("uv", np.float32, (2,)),
    ("color", np.float32, (4,)),
    ("texture_index", np.uint32),
])

WHITE: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)


@dataclass
class VertexData:
    """Everything the pipeline needs for one vertex."""

    position: tuple[float, float, float]
    uv: tuple[float, float]
    color: tuple[float, float, float, float] = field(default=WHITE)
    texture_index: int = 0

    def __post_init__(self) -> None:
        self.position = tuple(float(v) for v in self.position)
        self.uv = tuple(float(v) for v in self.uv)
        self.color = tuple(float(v) for v in self.color)
        self.texture_index = int(self.texture_index)

    def as_record(self) -> tuple:
        return (self.position, self.uv, self.color, self.texture_index)


def pack_vertices(vertices: Iterable[VertexData]) -> NDArray[np.void]:
    """Pack vertices into a contiguous ``VERTEX_DTYPE`` array."""
    return np.array([v.as_record() for v in vertices], dtype=VERTEX_DTYPE)
