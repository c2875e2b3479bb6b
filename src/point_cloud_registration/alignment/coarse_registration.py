"""
Coarse Registration by Centroid Matching

The auto-align shortcut: translate the source so that its centroid lands on
the target centroid. Rotation and scale are left untouched, so the result is
only a starting point for manual refinement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from ..utils.logging import setup_logger
from ..utils.point_set import PointSet, Vector3, calculate_centroid
from .rigid_transform import RigidTransform

logger = setup_logger(__name__)


def translation_to_match_centroids(
    source: Union[PointSet, np.ndarray],
    target: Union[PointSet, np.ndarray],
) -> Vector3:
    """
    Translation ``centroid(target) - centroid(source)``.

    Args:
        source: Movable point set
        target: Fixed point set

    Returns:
        (dx, dy, dz)

    Raises:
        ValueError: If either set is empty. Callers check emptiness first.
    """
    src = PointSet(source)
    dst = PointSet(target)
    if src.is_empty or dst.is_empty:
        raise ValueError("Cannot match centroids of an empty point set")

    c_src = calculate_centroid(src)
    c_dst = calculate_centroid(dst)
    return (c_dst[0] - c_src[0], c_dst[1] - c_src[1], c_dst[2] - c_src[2])


@dataclass
class AutoAligner:
    """Centroid-matching auto alignment for the source pose."""

    def align(self, source: PointSet, target: PointSet, current: RigidTransform) -> RigidTransform:
        """
        Return ``current`` with its position replaced by the centroid translation.

        Rotation and scale are kept as they are.
        """
        t = translation_to_match_centroids(source, target)
        logger.info("Auto-align translation: [%.4f, %.4f, %.4f]", t[0], t[1], t[2])
        return current.with_position(t)
