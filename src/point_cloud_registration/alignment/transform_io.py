"""
Transform persistence

Saves the source pose as a 4x4 homogeneous matrix text file (scale included,
as rendered) and reads it back into a pose.
"""

from pathlib import Path
from typing import Union

import numpy as np

from ..utils.logging import setup_logger
from .rigid_transform import RigidTransform

logger = setup_logger(__name__)


def save_transform_matrix(transform, output_file: Union[str, Path]) -> None:
    """Save a transform to a text file.

    Args:
        transform: RigidTransform or 4x4 matrix
        output_file: Path to output file
    """
    if isinstance(transform, RigidTransform):
        matrix = transform.to_matrix(include_scale=True)
    else:
        matrix = np.asarray(transform, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Transform must be 4x4 matrix, got {matrix.shape}")
    np.savetxt(output_file, matrix, fmt='%.18e', header='4x4 transformation matrix')
    logger.info(f"Saved transformation matrix to {output_file}")


def load_transform_matrix(input_file: Union[str, Path]) -> RigidTransform:
    """Read a matrix written by ``save_transform_matrix`` as a source pose.

    Raises:
        ValueError: If the file does not hold a 4x4 scaled rigid transform
    """
    matrix = np.loadtxt(input_file, ndmin=2)
    transform = RigidTransform.from_matrix(matrix)
    logger.info(
        f"Loaded transform from {input_file}: position={transform.position}, "
        f"rotation={transform.rotation}, scale={transform.scale:g}"
    )
    return transform
