"""
Visualization Module

Camera/slider fitting for the registration scene and rendering with Plotly or
PyVista.
"""

from .scene import SceneFitter, CameraPlacement, SliderRange, SliderRanges
from .point_cloud import PointCloudVisualizer

__all__ = [
    "SceneFitter",
    "CameraPlacement",
    "SliderRange",
    "SliderRanges",
    "PointCloudVisualizer",
]
