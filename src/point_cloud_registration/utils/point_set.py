"""
Point Set Container and Statistics

A point set is an ordered sequence of 3-D points stored as a flat float buffer
``[x0, y0, z0, x1, y1, z1, ...]``. Buffers are read-only once wrapped:
transformations always produce new arrays.

The two statistics here (centroid and bounding radius) feed the auto-aligner,
the camera framing and the slider ranges.
"""

from __future__ import annotations

from typing import Tuple, Union

import numpy as np

Vector3 = Tuple[float, float, float]

# Fallback radius for an empty cloud so that UI scaling stays sane
DEFAULT_BOUNDING_RADIUS = 10.0


def as_point_array(points: Union["PointSet", np.ndarray]) -> np.ndarray:
    """Return an N x 3 view of a PointSet, a flat buffer or an Nx3 array."""
    if isinstance(points, PointSet):
        return points.as_array()
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim == 2 and arr.shape[1] == 3:
        return arr
    flat = arr.reshape(-1)
    if flat.size % 3 != 0:
        raise ValueError(f"Point buffer length must be a multiple of 3, got {flat.size}")
    return flat.reshape(-1, 3)


def calculate_centroid(points: Union["PointSet", np.ndarray]) -> Vector3:
    """Componentwise mean of all points; (0, 0, 0) for an empty set."""
    arr = as_point_array(points)
    if arr.shape[0] == 0:
        return (0.0, 0.0, 0.0)
    c = arr.mean(axis=0)
    return (float(c[0]), float(c[1]), float(c[2]))


def calculate_bounding_radius(points: Union["PointSet", np.ndarray]) -> float:
    """
    Maximum Euclidean distance from the world origin over all points.

    The distance is measured from (0, 0, 0), not from the centroid: after
    recentering the origin already sits near the middle of the cloud.
    An empty set yields DEFAULT_BOUNDING_RADIUS.
    """
    arr = as_point_array(points)
    if arr.shape[0] == 0:
        return DEFAULT_BOUNDING_RADIUS
    d_sq = np.einsum("ij,ij->i", arr, arr)
    return float(np.sqrt(d_sq.max()))


class PointSet:
    """Immutable flat buffer of 3-D coordinates."""

    __slots__ = ("_flat",)

    def __init__(self, data=None):
        """
        Args:
            data: Flat buffer (length multiple of 3), Nx3 array, another
                PointSet, or None for an empty set.

        Raises:
            ValueError: If the buffer length is not a multiple of 3
        """
        if data is None:
            flat = np.empty(0, dtype=np.float64)
        elif isinstance(data, PointSet):
            flat = data._flat
        else:
            flat = np.array(data, dtype=np.float64).reshape(-1)
            if flat.size % 3 != 0:
                raise ValueError(f"Point buffer length must be a multiple of 3, got {flat.size}")
            flat.flags.writeable = False
        self._flat = flat

    @classmethod
    def empty(cls) -> "PointSet":
        return cls()

    @classmethod
    def from_points(cls, *points) -> "PointSet":
        """Build a set from individual (x, y, z) tuples."""
        return cls(np.asarray(points, dtype=np.float64).reshape(-1))

    # ----------------- Buffer access -----------------
    @property
    def flat(self) -> np.ndarray:
        return self._flat

    @property
    def count(self) -> int:
        return self._flat.size // 3

    @property
    def is_empty(self) -> bool:
        return self._flat.size == 0

    def as_array(self) -> np.ndarray:
        """Read-only N x 3 view of the buffer."""
        return self._flat.reshape(-1, 3)

    def point(self, index: int) -> Vector3:
        p = self.as_array()[index]
        return (float(p[0]), float(p[1]), float(p[2]))

    def sample(self, n: int) -> np.ndarray:
        """First ``n`` points (fewer when the set is smaller)."""
        n = max(0, min(int(n), self.count))
        return self.as_array()[:n]

    # ----------------- Statistics -----------------
    def centroid(self) -> Vector3:
        return calculate_centroid(self)

    def bounding_radius(self) -> float:
        return calculate_bounding_radius(self)

    def __len__(self) -> int:
        # Buffer length (3 * count), matching the flat representation
        return self._flat.size

    def __eq__(self, other) -> bool:
        if not isinstance(other, PointSet):
            return NotImplemented
        return np.array_equal(self._flat, other._flat)

    def __hash__(self):
        return hash(self._flat.tobytes())

    def __repr__(self) -> str:
        return f"PointSet(count={self.count})"
