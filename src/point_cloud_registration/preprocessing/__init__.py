"""
Point Cloud Input Module

- File loading (PLY, PCD, LAS/LAZ) into flat coordinate buffers
- Synthetic demo datasets
"""

from .loader import PointCloudLoader, PointCloudLoadError
from .datasets import (
    DatasetType,
    SyntheticDataset,
    build_dataset,
    generate_cube_points,
    generate_sphere_points,
)

__all__ = [
    "PointCloudLoader",
    "PointCloudLoadError",
    "DatasetType",
    "SyntheticDataset",
    "build_dataset",
    "generate_cube_points",
    "generate_sphere_points",
]
