"""
Scene Fitting

Derives camera placement and slider ranges from the loaded clouds.

The camera looks at the centroid of the fixed cloud (target when loaded,
otherwise source) from a diagonal position ``2.5`` bounding radii away along
each axis. A refit happens only when the combined point count of both clouds
changes; reloading a file with the same point count does not move the camera.

The translation slider range is the scene scale: at least ``min_scale`` and
never shrinking while clouds are uploaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..utils.logging import setup_logger
from ..utils.point_set import PointSet, Vector3

logger = setup_logger(__name__)

MIN_SCENE_SCALE = 10.0
CAMERA_DISTANCE_FACTOR = 2.5


@dataclass(frozen=True)
class CameraPlacement:
    target: Vector3
    position: Vector3
    distance: float


@dataclass(frozen=True)
class SliderRange:
    minimum: float
    maximum: float
    step: float


@dataclass(frozen=True)
class SliderRanges:
    translation: SliderRange
    rotation: SliderRange


class SceneFitter:
    """Tracks scene scale and camera framing for the two loaded clouds."""

    def __init__(
        self,
        min_scale: float = MIN_SCENE_SCALE,
        camera_distance_factor: float = CAMERA_DISTANCE_FACTOR,
        slider_steps: int = 200,
        rotation_step: float = 0.1,
    ):
        self.min_scale = float(min_scale)
        self.camera_distance_factor = float(camera_distance_factor)
        self.slider_steps = int(slider_steps)
        self.rotation_step = float(rotation_step)
        self.scene_scale = self.min_scale
        self.camera: Optional[CameraPlacement] = None
        self._last_total = 0

    @classmethod
    def from_config(cls, cfg) -> "SceneFitter":
        return cls(
            min_scale=cfg.min_scale,
            camera_distance_factor=cfg.camera_distance_factor,
            slider_steps=cfg.slider_steps,
            rotation_step=cfg.rotation_step,
        )

    # ----------------- Camera -----------------
    def fit(self, source: PointSet, target: PointSet) -> Optional[CameraPlacement]:
        """
        Refit the camera if the combined point count changed.

        Returns:
            The new placement, or None when no refit was needed.
        """
        total = source.count + target.count
        if total == 0 or total == self._last_total:
            return None

        fixed = target if not target.is_empty else source
        self.camera = self.camera_for(fixed)
        self._last_total = total
        logger.info(
            "Camera refit on %d points: target=[%.3f, %.3f, %.3f], distance=%.3f",
            total, *self.camera.target, self.camera.distance,
        )
        return self.camera

    def camera_for(self, points: PointSet) -> CameraPlacement:
        """Camera placement framing ``points`` from the fixed diagonal direction."""
        center = points.centroid()
        dist = self.camera_distance_factor * points.bounding_radius()
        position = (center[0] + dist, center[1] + dist, center[2] + dist)
        return CameraPlacement(target=center, position=position, distance=dist)

    # ----------------- Scale / sliders -----------------
    def expand_scale(self, radius: float) -> float:
        """Grow the scene scale to cover ``radius``; it never shrinks here."""
        if np.isfinite(radius):
            self.scene_scale = max(self.scene_scale, float(radius))
        return self.scene_scale

    @property
    def slider_range(self) -> float:
        return max(self.min_scale, self.scene_scale)

    def slider_ranges(self) -> SliderRanges:
        r = self.slider_range
        return SliderRanges(
            translation=SliderRange(-r, r, r / self.slider_steps),
            rotation=SliderRange(-float(np.pi), float(np.pi), self.rotation_step),
        )

    def reset_scale(self) -> None:
        self.scene_scale = self.min_scale
