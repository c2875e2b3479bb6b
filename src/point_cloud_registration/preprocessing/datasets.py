"""
Synthetic Demo Datasets

Small, pre-centered source/target pairs used to try the alignment controls
without uploading files. Each pair comes with an initial source translation
so that the clouds start visibly misaligned.

Synthetic datasets bypass the world-offset recentering: they are generated
around the origin already.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import numpy as np

from ..utils.point_set import PointSet, Vector3

RandomSource = Union[np.random.Generator, int, None]


class DatasetType(str, Enum):
    EMPTY = "EMPTY"
    CUBE = "CUBE"
    SPHERE = "SPHERE"
    TORUS = "TORUS"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class SyntheticDataset:
    source: PointSet = field(default_factory=PointSet.empty)
    target: PointSet = field(default_factory=PointSet.empty)
    initial_offset: Vector3 = (0.0, 0.0, 0.0)


def generate_sphere_points(
    count: int,
    radius: float,
    noise: float = 0.0,
    rng: RandomSource = None,
) -> PointSet:
    """
    Points spread over a sphere surface along a spherical spiral.

    Args:
        count: Number of points
        radius: Sphere radius
        noise: Width of the uniform jitter added to each coordinate
        rng: numpy Generator or seed

    Returns:
        PointSet with ``count`` points
    """
    if count <= 0:
        return PointSet.empty()
    rng = np.random.default_rng(rng)
    i = np.arange(count, dtype=np.float64)
    phi = np.arccos(-1.0 + (2.0 * i) / count)
    theta = np.sqrt(count * np.pi) * phi

    jitter = (rng.random((count, 3)) - 0.5) * noise
    pts = np.column_stack([
        radius * np.cos(theta) * np.sin(phi),
        radius * np.sin(theta) * np.sin(phi),
        radius * np.cos(phi),
    ]) + jitter
    return PointSet(pts)


def generate_cube_points(
    count: int,
    size: float,
    noise: float = 0.0,
    rng: RandomSource = None,
) -> PointSet:
    """Points uniformly filling an axis-aligned cube of edge ``size`` centered at the origin."""
    if count <= 0:
        return PointSet.empty()
    rng = np.random.default_rng(rng)
    pts = (rng.random((count, 3)) - 0.5) * size + (rng.random((count, 3)) - 0.5) * noise
    return PointSet(pts)


def build_dataset(kind: DatasetType, rng: RandomSource = None) -> SyntheticDataset:
    """
    Build the demo pair for ``kind``.

    EMPTY and CUSTOM yield empty point sets; CUSTOM content only ever comes
    from uploads.
    """
    kind = DatasetType(kind)
    rng = np.random.default_rng(rng)

    if kind == DatasetType.SPHERE:
        return SyntheticDataset(
            source=generate_sphere_points(2000, 3.0, 0.1, rng),  # noisier source
            target=generate_sphere_points(2000, 3.0, 0.05, rng),
            initial_offset=(5.0, 3.0, -2.0),
        )
    if kind == DatasetType.CUBE:
        return SyntheticDataset(
            source=generate_cube_points(3000, 4.0, 0.1, rng),
            target=generate_cube_points(3000, 4.0, 0.02, rng),
            initial_offset=(-4.0, 2.0, 4.0),
        )
    if kind == DatasetType.TORUS:
        # TODO: replace the sphere stand-in with a real torus generator
        return SyntheticDataset(
            source=generate_sphere_points(1000, 3.0, 0.0, rng),
            target=generate_sphere_points(1000, 3.0, 0.0, rng),
        )
    return SyntheticDataset()


def dataset_or_none(name: Optional[str]) -> Optional[DatasetType]:
    """Parse a dataset name case-insensitively (None passes through)."""
    if name is None:
        return None
    try:
        return DatasetType(name.upper())
    except ValueError:
        raise ValueError(
            f"Unknown dataset '{name}'. Choose one of: {', '.join(t.value.lower() for t in DatasetType)}"
        ) from None
