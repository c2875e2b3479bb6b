"""Tests for the synthetic demo datasets."""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent / "src"))

from point_cloud_registration.preprocessing.datasets import (
    DatasetType,
    build_dataset,
    dataset_or_none,
    generate_cube_points,
    generate_sphere_points,
)


def test_sphere_points_lie_on_sphere_without_noise():
    pts = generate_sphere_points(500, 3.0, rng=0)
    radii = np.linalg.norm(pts.as_array(), axis=1)
    assert pts.count == 500
    np.testing.assert_allclose(radii, 3.0)


def test_sphere_noise_is_bounded():
    pts = generate_sphere_points(500, 3.0, noise=0.1, rng=0)
    radii = np.linalg.norm(pts.as_array(), axis=1)
    # Jitter is within +-0.05 per axis
    assert np.all(np.abs(radii - 3.0) <= 0.05 * np.sqrt(3) + 1e-12)


def test_cube_points_inside_cube():
    pts = generate_cube_points(1000, 4.0, rng=1)
    arr = pts.as_array()
    assert arr.shape == (1000, 3)
    assert np.all(np.abs(arr) <= 2.0)


def test_generators_handle_zero_count():
    assert generate_sphere_points(0, 1.0).is_empty
    assert generate_cube_points(0, 1.0).is_empty


@pytest.mark.parametrize(
    "kind, count, offset",
    [
        (DatasetType.SPHERE, 2000, (5.0, 3.0, -2.0)),
        (DatasetType.CUBE, 3000, (-4.0, 2.0, 4.0)),
        (DatasetType.TORUS, 1000, (0.0, 0.0, 0.0)),
    ],
)
def test_build_dataset(kind, count, offset):
    data = build_dataset(kind, rng=0)
    assert data.source.count == count
    assert data.target.count == count
    assert data.initial_offset == offset


def test_empty_and_custom_datasets_have_no_points():
    for kind in (DatasetType.EMPTY, DatasetType.CUSTOM):
        data = build_dataset(kind)
        assert data.source.is_empty and data.target.is_empty


def test_dataset_name_parsing():
    assert dataset_or_none("sphere") == DatasetType.SPHERE
    assert dataset_or_none(None) is None
    with pytest.raises(ValueError, match="Unknown dataset"):
        dataset_or_none("dodecahedron")
