"""
Utility Functions Module

Common building blocks used across the package:
- Logging setup
- Typed YAML configuration
- Point set container and statistics
- World offset recentering
"""

from .logging import setup_logger, configure_package_logging
from .config import AppConfig, load_config
from .point_set import PointSet, calculate_centroid, calculate_bounding_radius
from .coordinate_transform import WorldOffset, Recenterer, shift_points

__all__ = [
    "setup_logger",
    "configure_package_logging",
    "AppConfig",
    "load_config",
    "PointSet",
    "calculate_centroid",
    "calculate_bounding_radius",
    "WorldOffset",
    "Recenterer",
    "shift_points",
]
