"""
World Offset Recentering for Uploaded Point Clouds.

Scanned point clouds often come in projected coordinates (e.g. UTM) with very
large values, which makes interactive rendering jitter and erodes float
precision. Uploaded clouds are therefore shifted into a local frame:

1. The first upload of a session defines the world offset as its own centroid
2. Every upload (source or target) is shifted by that same offset
3. The original coordinates can be restored by adding the offset back

Sharing a single offset keeps the relative placement of source and target
intact, even when the second cloud lies far away from the first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .logging import setup_logger
from .point_set import PointSet, Vector3, calculate_centroid

logger = setup_logger(__name__)


def shift_points(points: Union[PointSet, np.ndarray], offset: Vector3) -> PointSet:
    """Subtract ``offset`` from every point, returning a new PointSet.

    The input is never modified. Adding the offset back restores the input
    only up to float64 rounding: with coordinates around 1e6 and a
    non-integral offset, the last bit of some values can differ.

    Args:
        points: PointSet or flat/Nx3 buffer
        offset: (x, y, z) vector to subtract

    Returns:
        New PointSet of identical length
    """
    src = PointSet(points)
    if src.is_empty:
        return PointSet.empty()
    shifted = src.as_array() - np.asarray(offset, dtype=np.float64)
    return PointSet(shifted)


@dataclass
class WorldOffset:
    """Session-wide offset between uploaded (global) and scene (local) coordinates.

    The transform is defined as:
        local = global - offset
        global = local + offset

    The offset is unset until the first upload and, once set, stays fixed
    until ``clear()`` is called.

    Example:
        >>> world = WorldOffset()
        >>> pts = np.array([[1000.0, 1000.0, 0.0], [1002.0, 1000.0, 0.0]])
        >>> local = Recenterer().ingest(pts, world)   # centroid -> (0, 0, 0)
        >>> world.offset
        (1001.0, 1000.0, 0.0)
    """

    offset: Optional[Vector3] = None

    @property
    def is_set(self) -> bool:
        return self.offset is not None

    def set_from_centroid(self, points: Union[PointSet, np.ndarray]) -> Vector3:
        """Fix the offset to the centroid of ``points``.

        Raises:
            ValueError: If the offset is already set or the points are empty
        """
        if self.offset is not None:
            raise ValueError(f"World offset already set to {self.offset}")
        pts = PointSet(points)
        if pts.is_empty:
            raise ValueError("Cannot compute world offset from empty point cloud")
        self.offset = calculate_centroid(pts)
        return self.offset

    def clear(self) -> None:
        self.offset = None

    def to_local(self, points: Union[PointSet, np.ndarray]) -> PointSet:
        """Global -> local; identity while the offset is unset."""
        if self.offset is None:
            return PointSet(points)
        return shift_points(points, self.offset)

    def to_global(self, points: Union[PointSet, np.ndarray]) -> PointSet:
        """Local -> global; identity while the offset is unset."""
        if self.offset is None:
            return PointSet(points)
        ox, oy, oz = self.offset
        return shift_points(points, (-ox, -oy, -oz))

    def __str__(self) -> str:
        if self.offset is None:
            return "WorldOffset(unset)"
        return f"WorldOffset(offset=[{self.offset[0]:.2f}, {self.offset[1]:.2f}, {self.offset[2]:.2f}])"


class Recenterer:
    """Applies the session's world offset to newly ingested point sets."""

    def ingest(self, points: Union[PointSet, np.ndarray], world: WorldOffset) -> PointSet:
        """
        Shift an uploaded cloud into the session's local frame.

        The first non-empty upload of a session defines the offset as its own
        centroid, so it lands around the origin. Later uploads reuse that
        offset rather than their own centroid.

        Args:
            points: Raw uploaded coordinates
            world: Offset state owned by the session

        Returns:
            Recentered PointSet (empty input returns an empty set)
        """
        pts = PointSet(points)
        if pts.is_empty:
            return pts
        if not world.is_set:
            offset = world.set_from_centroid(pts)
            logger.info(
                "World offset set from first upload centroid: [%.3f, %.3f, %.3f]",
                offset[0], offset[1], offset[2],
            )
        return shift_points(pts, world.offset)
