"""
Spatial Alignment Module

Rigid pose model, centroid auto-alignment and the stochastic alignment error
used for interactive feedback.
"""

from .rigid_transform import (
    RigidTransform,
    apply_transform,
    apply_transform_for_display,
    euler_rotation_matrix,
    transform_points,
)
from .error_estimation import AlignmentEstimator, AlignmentStatus, alignment_status, calculate_rmse
from .coarse_registration import AutoAligner, translation_to_match_centroids
from .transform_io import save_transform_matrix, load_transform_matrix

__all__ = [
    "RigidTransform",
    "apply_transform",
    "apply_transform_for_display",
    "euler_rotation_matrix",
    "transform_points",
    "AlignmentEstimator",
    "AlignmentStatus",
    "alignment_status",
    "calculate_rmse",
    "AutoAligner",
    "translation_to_match_centroids",
    "save_transform_matrix",
    "load_transform_matrix",
]
