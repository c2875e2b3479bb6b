"""
Tests for centroid auto-alignment.
"""

import numpy as np
import pytest
from pathlib import Path
import sys

# Ensure src is importable
sys.path.append(str(Path(__file__).parent.parent / "src"))

from point_cloud_registration.alignment.coarse_registration import (
    AutoAligner,
    translation_to_match_centroids,
)
from point_cloud_registration.alignment.error_estimation import AlignmentEstimator
from point_cloud_registration.alignment.rigid_transform import RigidTransform, transform_points
from point_cloud_registration.utils.point_set import PointSet, calculate_centroid


def test_single_point_translation():
    source = PointSet.from_points((1.0, 0.0, 0.0))
    target = PointSet.from_points((4.0, 0.0, 0.0))
    assert translation_to_match_centroids(source, target) == (3.0, 0.0, 0.0)


def test_translation_matches_centroids():
    rng = np.random.default_rng(0)
    A = PointSet(rng.normal(size=(2000, 3)) * np.array([10.0, 5.0, 2.0]))
    B = PointSet(rng.normal(size=(1500, 3)) + np.array([2.3, -1.1, 0.4]))

    t = translation_to_match_centroids(A, B)
    moved = transform_points(A, RigidTransform(position=t))

    np.testing.assert_allclose(calculate_centroid(moved), calculate_centroid(B), atol=1e-12)


def test_auto_align_reduces_error_of_translated_copy():
    rng = np.random.default_rng(1)
    A = rng.normal(size=(300, 3)) * np.array([10.0, 5.0, 2.0])
    B = A + np.array([12.0, -7.0, 3.0])
    source, target = PointSet(A), PointSet(B)

    estimator = AlignmentEstimator(rng=5)
    before = estimator.estimate(source, target)
    aligned = AutoAligner().align(source, target, RigidTransform.identity())
    after = estimator.estimate(source, target, aligned)

    assert after < before * 0.5


def test_auto_align_keeps_rotation_and_scale():
    source = PointSet.from_points((0.0, 0.0, 0.0), (2.0, 0.0, 0.0))
    target = PointSet.from_points((10.0, 10.0, 10.0))
    current = RigidTransform(position=(99.0, 99.0, 99.0), rotation=(0.1, 0.2, 0.3), scale=2.0)

    aligned = AutoAligner().align(source, target, current)

    assert aligned.position == pytest.approx((9.0, 10.0, 10.0))
    assert aligned.rotation == current.rotation
    assert aligned.scale == current.scale


def test_empty_inputs_are_refused():
    cloud = PointSet.from_points((1.0, 2.0, 3.0))
    with pytest.raises(ValueError, match="empty"):
        translation_to_match_centroids(PointSet.empty(), cloud)
    with pytest.raises(ValueError, match="empty"):
        translation_to_match_centroids(cloud, PointSet.empty())
