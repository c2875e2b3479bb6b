"""
Rigid Transform Model

The movable source cloud carries a pose made of a translation, an Euler
rotation (radians, intrinsic X -> Y -> Z, i.e. ``R = Rx @ Ry @ Rz``) and a
uniform scale.

Scale is a display-only parameter. The renderer applies it, but the alignment
error only considers rotation and translation, so ``apply_transform`` ignores
it while ``apply_transform_for_display`` and ``to_matrix`` include it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, Union

import numpy as np

from ..utils.point_set import PointSet, Vector3, as_point_array


def _rotation_x(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _rotation_y(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _rotation_z(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def euler_rotation_matrix(rotation: Sequence[float]) -> np.ndarray:
    """3x3 rotation for intrinsic XYZ Euler angles (radians).

    Each axis rotation is built separately and composed as Rx @ Ry @ Rz.
    """
    rx, ry, rz = (float(a) for a in rotation)
    return _rotation_x(rx) @ _rotation_y(ry) @ _rotation_z(rz)


@dataclass(frozen=True)
class RigidTransform:
    """Pose of the source cloud: position, Euler rotation and display scale."""

    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    scale: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "position", _as_vector(self.position, "position"))
        object.__setattr__(self, "rotation", _as_vector(self.rotation, "rotation"))
        object.__setattr__(self, "scale", float(self.scale))

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls()

    @classmethod
    def from_translation(cls, x: float, y: float, z: float) -> "RigidTransform":
        return cls(position=(x, y, z))

    # Copies with one field replaced
    def with_position(self, position: Sequence[float]) -> "RigidTransform":
        return replace(self, position=position)

    def with_rotation(self, rotation: Sequence[float]) -> "RigidTransform":
        return replace(self, rotation=rotation)

    def with_scale(self, scale: float) -> "RigidTransform":
        return replace(self, scale=scale)

    def with_axis(self, field_name: str, axis: int, value: float) -> "RigidTransform":
        """Replace a single component of ``position`` or ``rotation``."""
        if field_name not in ("position", "rotation"):
            raise ValueError(f"Unknown transform field '{field_name}'")
        values = list(getattr(self, field_name))
        values[axis] = float(value)
        return replace(self, **{field_name: tuple(values)})

    @property
    def is_identity(self) -> bool:
        return self == RigidTransform.identity()

    def rotation_matrix(self) -> np.ndarray:
        return euler_rotation_matrix(self.rotation)

    def to_matrix(self, *, include_scale: bool = True) -> np.ndarray:
        """4x4 homogeneous matrix, ``p' = R @ (s * p) + t`` when scale is included."""
        T = np.eye(4)
        R = self.rotation_matrix()
        T[:3, :3] = R * self.scale if include_scale else R
        T[:3, 3] = self.position
        return T

    @classmethod
    def from_matrix(cls, matrix: np.ndarray, *, atol: float = 1e-6) -> "RigidTransform":
        """
        Decompose a 4x4 matrix produced by ``to_matrix`` back into a pose.

        The upper 3x3 block must be a rotation times a uniform (possibly
        negative) scale. At gimbal lock (Y rotation of +-pi/2) the Z angle is
        folded into X.

        Raises:
            ValueError: If the matrix is not a scaled rigid transform
        """
        T = np.asarray(matrix, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError(f"Expected 4x4 matrix, got shape {T.shape}")
        if not np.allclose(T[3], [0.0, 0.0, 0.0, 1.0], atol=atol):
            raise ValueError("Bottom row of a rigid transform must be [0, 0, 0, 1]")

        M = T[:3, :3]
        scale = float(np.cbrt(np.linalg.det(M)))
        if abs(scale) < atol:
            raise ValueError("Transform matrix is degenerate (zero scale)")
        R = M / scale
        if not np.allclose(R @ R.T, np.eye(3), atol=atol):
            raise ValueError("Transform matrix contains shear or non-uniform scale")

        # R = Rx(a) @ Ry(b) @ Rz(c): R[0, 2] = sin(b)
        ry = float(np.arcsin(np.clip(R[0, 2], -1.0, 1.0)))
        if abs(R[0, 2]) < 1.0 - 1e-9:
            rx = float(np.arctan2(-R[1, 2], R[2, 2]))
            rz = float(np.arctan2(-R[0, 1], R[0, 0]))
        else:
            rx = float(np.arctan2(R[2, 1], R[1, 1]))
            rz = 0.0
        return cls(position=tuple(T[:3, 3]), rotation=(rx, ry, rz), scale=scale)


def _as_vector(values: Sequence[float], name: str) -> Vector3:
    vals = tuple(float(v) for v in values)
    if len(vals) != 3:
        raise ValueError(f"Transform {name} must have 3 components, got {len(vals)}")
    return vals  # type: ignore[return-value]


def apply_transform(point: Sequence[float], transform: RigidTransform) -> Vector3:
    """Rotate (X, then Y, then Z) and translate a single point.

    Scale is intentionally left out: alignment error measures rigid pose only.
    """
    p = transform.rotation_matrix() @ np.asarray(point, dtype=np.float64)
    p = p + np.asarray(transform.position)
    return (float(p[0]), float(p[1]), float(p[2]))


def transform_points(points: Union[PointSet, np.ndarray], transform: RigidTransform) -> np.ndarray:
    """Vectorised ``apply_transform`` over an N x 3 array (rotation + translation)."""
    arr = as_point_array(points)
    if arr.shape[0] == 0:
        return np.empty((0, 3), dtype=np.float64)
    R = transform.rotation_matrix()
    return arr @ R.T + np.asarray(transform.position)


def apply_transform_for_display(points: Union[PointSet, np.ndarray], transform: RigidTransform) -> np.ndarray:
    """Rendering path: scale, rotate, then translate (matches ``to_matrix``)."""
    arr = as_point_array(points)
    if arr.shape[0] == 0:
        return np.empty((0, 3), dtype=np.float64)
    R = transform.rotation_matrix()
    return (arr * transform.scale) @ R.T + np.asarray(transform.position)
