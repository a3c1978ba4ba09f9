"""Spritesheet animation: clips, frame selection and UV mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.transform import scaling2d, translation2d
from ..errors import MalformedSceneData


class AnimationType(Enum):
    """Whether and how an animation repeats."""

    # 1 2 3 1 2 3
    LOOP = "Loop"
    # 1 2 3 2 1 2 3
    BOUNCE = "Bounce"
    # 1 2 3, then hold on 3
    ONCE = "Once"

    @classmethod
    def parse(cls, value: AnimationType | str) -> AnimationType:
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise MalformedSceneData(f"Unknown animation type: {value!r}")


def calculate_frame(
    elapsed_ms: float,
    frame_count: int,
    frame_length: int,
    animation_type: AnimationType = AnimationType.LOOP,
) -> int:
    """Position in a clip's frame sequence after ``elapsed_ms`` milliseconds.

    Args:
        elapsed_ms: Time since the clip started
        frame_count: Number of frames in the clip
        frame_length: Duration of each frame in milliseconds
        animation_type: How the clip repeats

    Returns:
        Index into the clip's ``frames`` list
    """
    if frame_count <= 1:
        return 0
    step = int(elapsed_ms // frame_length)

    if animation_type is AnimationType.ONCE:
        return min(step, frame_count - 1)
    if animation_type is AnimationType.BOUNCE:
        period = 2 * frame_count - 2
        phase = step % period
        return phase if phase < frame_count else period - phase
    return step % frame_count


@dataclass
class Animation:
    """A clip of spritesheet frames."""

    frames: list[int]
    animation_type: AnimationType = AnimationType.LOOP
    # Milliseconds per frame
    frame_length: int = 100

    def __post_init__(self) -> None:
        self.frames = [int(f) for f in self.frames]
        self.animation_type = AnimationType.parse(self.animation_type)
        self.frame_length = int(self.frame_length)
        if not self.frames:
            raise ValueError("An animation needs at least one frame")
        if self.frame_length <= 0:
            raise ValueError("frame_length must be positive")

    def frame_at(self, elapsed_ms: float) -> int:
        """Spritesheet frame number shown ``elapsed_ms`` after the clip started."""
        position = calculate_frame(
            elapsed_ms, len(self.frames), self.frame_length, self.animation_type
        )
        return self.frames[position]

    def to_dict(self) -> dict[str, Any]:
        return {
            "frames": list(self.frames),
            "animation_type": self.animation_type.value,
            "frame_length": self.frame_length,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        if not isinstance(data, dict) or "frames" not in data:
            raise MalformedSceneData(f"Invalid animation: {data!r}")
        try:
            return cls(**data)
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid animation: {err}") from err


@dataclass
class Spritesheet:
    """A grid of equally sized frames inside a texture, in pixels."""

    index: int
    # Number of frames in each row
    pitch: int
    position: list[float] = field(default_factory=lambda: [0.0, 0.0])
    size: list[float] = field(default_factory=lambda: [0.0, 0.0])
    frame_size: list[float] = field(default_factory=lambda: [0.0, 0.0])

    def __post_init__(self) -> None:
        self.index = int(self.index)
        self.pitch = int(self.pitch)
        if self.pitch <= 0:
            raise ValueError("pitch must be positive")
        self.position = [float(v) for v in self.position]
        self.size = [float(v) for v in self.size]
        self.frame_size = [float(v) for v in self.frame_size]

    def frame_origin(self, frame: int) -> NDArray[np.float64]:
        """Pixel offset of ``frame`` from the sheet's top-left corner."""
        column, row = frame % self.pitch, frame // self.pitch
        return np.array([
            column * self.frame_size[0],
            row * self.frame_size[1],
        ], dtype=np.float64)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "pitch": self.pitch,
            "position": list(self.position),
            "size": list(self.size),
            "frame_size": list(self.frame_size),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        if not isinstance(data, dict):
            raise MalformedSceneData(f"Invalid spritesheet: {data!r}")
        try:
            return cls(**data)
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid spritesheet: {err}") from err


def normalization_matrix(texture_size: Sequence[float]) -> NDArray[np.float64]:
    """Scale pixel coordinates of a texture into the [0, 1] UV range."""
    return scaling2d((1.0 / texture_size[0], 1.0 / texture_size[1]))


def quad_uv_matrix(
    uv_offset: Sequence[float],
    region_size: Sequence[float],
    texture_size: Sequence[float],
) -> NDArray[np.float64]:
    """UV mapping for a plain quad showing a region of a texture.

    Args:
        uv_offset: Pixel position of the region's top-left corner
        region_size: Pixel size of the region
        texture_size: Pixel size of the whole texture
    """
    return (
        normalization_matrix(texture_size)
        @ translation2d(uv_offset)
        @ scaling2d(region_size)
    )


def animation_uv_matrix(
    spritesheet: Spritesheet, frame: int, texture_size: Sequence[float]
) -> NDArray[np.float64]:
    """UV mapping that shows one spritesheet frame on a quad."""
    return (
        normalization_matrix(texture_size)
        @ translation2d(spritesheet.frame_origin(frame))
        @ translation2d(spritesheet.position)
        @ scaling2d(spritesheet.frame_size)
    )
