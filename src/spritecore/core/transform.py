"""2D transform data and the transform-composition capability."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Self, Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import MalformedSceneData


def translation2d(offset: Sequence[float] | NDArray) -> NDArray[np.float64]:
    """3x3 homogeneous translation matrix."""
    mat = np.eye(3, dtype=np.float64)
    mat[0, 2] = offset[0]
    mat[1, 2] = offset[1]
    return mat


def rotation2d(angle: float) -> NDArray[np.float64]:
    """3x3 homogeneous counter-clockwise rotation about the origin (radians)."""
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return np.array([
        [cos_a, -sin_a, 0.0],
        [sin_a, cos_a, 0.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


def scaling2d(factors: Sequence[float] | NDArray) -> NDArray[np.float64]:
    """3x3 homogeneous axis-aligned scaling matrix."""
    return np.diag([float(factors[0]), float(factors[1]), 1.0])


def _real(value: Any, name: str) -> float:
    # bool is an Integral; YAML true/false are not coordinates
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _pair(value: Sequence[float] | NDArray, name: str) -> list[float]:
    items = value.ravel().tolist() if isinstance(value, np.ndarray) else list(value)
    values = [_real(v, name) for v in items]
    if len(values) != 2:
        raise ValueError(f"{name} must have exactly 2 components, got {len(values)}")
    return values


@dataclass
class TransformData:
    """An object's position, orientation and size in the 2D plane.

    Translation and scaling are kept as plain two-element lists of floats so
    the record maps field-for-field onto YAML. Ranges are not checked: zero or
    negative scaling is allowed and produces degenerate or mirrored quads.
    """

    translation: list[float] = field(default_factory=lambda: [0.0, 0.0])
    scaling: list[float] = field(default_factory=lambda: [1.0, 1.0])
    rotation: float = 0.0

    def __post_init__(self) -> None:
        self.translation = _pair(self.translation, "translation")
        self.scaling = _pair(self.scaling, "scaling")
        self.rotation = _real(self.rotation, "rotation")

    @classmethod
    def new(
        cls,
        translation: Sequence[float] | NDArray,
        scaling: Sequence[float] | NDArray,
        rotation: float,
    ) -> Self:
        """Create transform data from 2D vector-likes and a rotation in radians."""
        return cls(translation=translation, scaling=scaling, rotation=rotation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "translation": list(self.translation),
            "scaling": list(self.scaling),
            "rotation": self.rotation,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Rebuild transform data from its serialized form.

        Raises:
            MalformedSceneData: If a key is missing or a value has the wrong
                shape or type
        """
        if not isinstance(data, dict):
            raise MalformedSceneData(f"transform_data must be a mapping, got {data!r}")
        missing = {"translation", "scaling", "rotation"} - data.keys()
        if missing:
            raise MalformedSceneData(
                f"transform_data is missing {', '.join(sorted(missing))}"
            )
        try:
            return cls(
                translation=data["translation"],
                scaling=data["scaling"],
                rotation=data["rotation"],
            )
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid transform_data: {err}") from err

    def copy(self) -> Self:
        return TransformData(
            translation=list(self.translation),
            scaling=list(self.scaling),
            rotation=self.rotation,
        )


@dataclass
class Movement2D:
    """Per-step change applied to a transform when an object is moved."""

    delta_translate: list[float] = field(default_factory=lambda: [0.0, 0.0])
    delta_rotation: float = 0.0
    delta_scale: list[float] = field(default_factory=lambda: [0.0, 0.0])

    def __post_init__(self) -> None:
        self.delta_translate = _pair(self.delta_translate, "delta_translate")
        self.delta_scale = _pair(self.delta_scale, "delta_scale")
        self.delta_rotation = _real(self.delta_rotation, "delta_rotation")

    def apply(self, transform_data: TransformData, direction: int = 1) -> None:
        """Step ``transform_data`` forward (+1) or backward (-1) in place."""
        for axis in range(2):
            transform_data.translation[axis] += direction * self.delta_translate[axis]
            transform_data.scaling[axis] += direction * self.delta_scale[axis]
        transform_data.rotation += direction * self.delta_rotation

    def to_dict(self) -> dict[str, Any]:
        return {
            "delta_translate": list(self.delta_translate),
            "delta_rotation": self.delta_rotation,
            "delta_scale": list(self.delta_scale),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MalformedSceneData(f"movement must be a mapping, got {data!r}")
        try:
            return cls(**data)
        except (TypeError, ValueError) as err:
            raise MalformedSceneData(f"Invalid movement: {err}") from err


class Transform2D:
    """Capability for anything that can be drawn with a model matrix.

    Subclasses override any of the three sub-matrix methods; each defaults to
    the identity, so an object that overrides nothing is drawn unscaled,
    unrotated and at the origin.

    ``transformation_matrix`` is fixed: scale first, then rotate about the
    origin, then translate. Subclasses may not redefine it.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "transformation_matrix" in cls.__dict__:
            raise TypeError(
                f"{cls.__name__} may not override transformation_matrix(); "
                "override translation_matrix, rotation_matrix or scaling_matrix"
            )

    def translation_matrix(self) -> NDArray[np.float64]:
        return np.eye(3, dtype=np.float64)

    def rotation_matrix(self) -> NDArray[np.float64]:
        return np.eye(3, dtype=np.float64)

    def scaling_matrix(self) -> NDArray[np.float64]:
        return np.eye(3, dtype=np.float64)

    def transformation_matrix(self) -> NDArray[np.float64]:
        """Combined 3x3 model matrix: T * R * S."""
        return self.translation_matrix() @ self.rotation_matrix() @ self.scaling_matrix()


class TransformedDrawable(Transform2D):
    """A drawable whose sub-matrices come from its ``transform_data``."""

    transform_data: TransformData

    def translation_matrix(self) -> NDArray[np.float64]:
        return translation2d(self.transform_data.translation)

    def rotation_matrix(self) -> NDArray[np.float64]:
        return rotation2d(self.transform_data.rotation)

    def scaling_matrix(self) -> NDArray[np.float64]:
        return scaling2d(self.transform_data.scaling)


def apply_transform(
    matrix: NDArray[np.floating], points: Sequence[Sequence[float]] | NDArray
) -> NDArray[np.float64]:
    """Transform Nx2 points by a 3x3 homogeneous matrix.

    Args:
        matrix: 3x3 affine matrix
        points: Nx2 array (or a single 2-vector)

    Returns:
        Transformed points with the same leading shape as ``points``
    """
    pts = np.asarray(points, dtype=np.float64)
    single = pts.ndim == 1
    pts = np.atleast_2d(pts)
    ones = np.ones((len(pts), 1))
    homogeneous = np.hstack([pts, ones])
    transformed = (np.asarray(matrix, dtype=np.float64) @ homogeneous.T).T[:, :2]
    return transformed[0] if single else transformed
