"""
Stochastic Alignment Error

Provides a cheap, randomized RMSE between the transformed source and the
target, meant to be recomputed on every change of the transform.

For each of up to ``source_samples`` source points (drawn uniformly with
replacement) the approximate nearest target neighbour is the closest of
``target_checks`` target points, also drawn uniformly with replacement. The
result is ``sqrt(mean(min squared distance))``.

This is not an exact nearest-neighbour search: the cost is bounded by
``source_samples * target_checks`` distance evaluations regardless of cloud
size, and repeated calls on identical inputs return slightly different values.
Only rotation and translation enter the metric; the transform's scale is
render-only.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

import numpy as np

from ..utils.logging import setup_logger
from ..utils.point_set import PointSet, as_point_array
from .rigid_transform import RigidTransform, transform_points

logger = setup_logger(__name__)

RandomSource = Union[np.random.Generator, int, None]

DEFAULT_SOURCE_SAMPLES = 100
DEFAULT_TARGET_CHECKS = 200


class AlignmentStatus(str, Enum):
    ALIGNED = "Aligned"
    MISALIGNED = "Misaligned"
    UNKNOWN = "Unknown"


class AlignmentEstimator:
    """
    Randomized nearest-neighbour RMSE between a posed source and a target.

    The random generator is injectable so tests can seed it; production code
    leaves it unseeded.
    """

    def __init__(
        self,
        source_samples: int = DEFAULT_SOURCE_SAMPLES,
        target_checks: int = DEFAULT_TARGET_CHECKS,
        rng: RandomSource = None,
    ):
        """
        Args:
            source_samples: Maximum number of source points drawn per estimate.
            target_checks: Number of target points examined per source sample.
            rng: numpy Generator, integer seed, or None for fresh entropy.
        """
        if source_samples <= 0 or target_checks <= 0:
            raise ValueError("source_samples and target_checks must be positive")
        self.source_samples = int(source_samples)
        self.target_checks = int(target_checks)
        self.rng = np.random.default_rng(rng)

    @classmethod
    def from_config(cls, cfg, rng: RandomSource = None) -> "AlignmentEstimator":
        """Build from an ``AlignmentConfig``; an explicit rng wins over the configured seed."""
        rmse_cfg = cfg.rmse
        return cls(
            source_samples=rmse_cfg.source_samples,
            target_checks=rmse_cfg.target_checks,
            rng=rng if rng is not None else rmse_cfg.seed,
        )

    def estimate(
        self,
        source: Union[PointSet, np.ndarray],
        target: Union[PointSet, np.ndarray],
        transform: Optional[RigidTransform] = None,
    ) -> float:
        """
        Estimate the alignment RMSE of ``source`` (posed by ``transform``) to ``target``.

        Returns:
            RMSE in scene units; 0.0 when either set is empty.
        """
        src = as_point_array(source)
        tgt = as_point_array(target)
        n_src = src.shape[0]
        n_tgt = tgt.shape[0]
        if n_src == 0 or n_tgt == 0:
            return 0.0

        if transform is None:
            transform = RigidTransform.identity()

        sample_size = min(self.source_samples, n_src)
        check_count = min(self.target_checks, n_tgt)

        idx_s = self.rng.integers(0, n_src, size=sample_size)
        moved = transform_points(src[idx_s], transform)

        # Independent target draws for every source sample
        idx_t = self.rng.integers(0, n_tgt, size=(sample_size, check_count))
        diff = moved[:, None, :] - tgt[idx_t]
        d_sq = np.einsum("ijk,ijk->ij", diff, diff)
        min_sq = d_sq.min(axis=1)

        rmse = float(np.sqrt(np.mean(min_sq)))
        logger.debug(
            "RMSE estimate %.6f from %d source samples x %d target checks",
            rmse, sample_size, check_count,
        )
        return rmse


def calculate_rmse(
    source: Union[PointSet, np.ndarray],
    target: Union[PointSet, np.ndarray],
    transform: Optional[RigidTransform] = None,
    *,
    rng: RandomSource = None,
) -> float:
    """Functional shortcut for ``AlignmentEstimator(rng=rng).estimate(...)``."""
    return AlignmentEstimator(rng=rng).estimate(source, target, transform)


def alignment_status(
    rmse: float,
    slider_range: float,
    *,
    tolerance_fraction: float = 0.05,
    has_data: bool = True,
) -> AlignmentStatus:
    """Classify an RMSE relative to the current translation slider range."""
    if not has_data or not np.isfinite(rmse):
        return AlignmentStatus.UNKNOWN
    if rmse < slider_range * tolerance_fraction:
        return AlignmentStatus.ALIGNED
    return AlignmentStatus.MISALIGNED
