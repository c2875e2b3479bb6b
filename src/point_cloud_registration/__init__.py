"""
Point Cloud Registration Package

Interactive rigid alignment of a movable source point cloud onto a fixed
target. The package provides the geometry engine behind manual alignment:
point set statistics, a rigid pose model, world-offset recentering for large
coordinates, a cheap stochastic RMSE for live feedback, centroid auto-alignment
and camera/slider fitting. File loading, plotly/pyvista rendering and a hosted
language-model advisory sit around that core.
"""

__version__ = "0.1.0"

from .utils import *
from .alignment import *
from .preprocessing import *
from .visualization import *
from .advisory import *
from .pipeline import *

__all__ = [
    "utils",
    "alignment",
    "preprocessing",
    "visualization",
    "advisory",
    "pipeline",
]
