"""
Registration Session

Holds everything that changes while a user aligns two clouds: the source and
target point sets, the source pose, the world offset shared by uploads, the
scene scale and the last advisory text. UI layers call the methods here and
read back the RMSE, slider ranges and camera placement.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from ..advisory.advisor import RegistrationAdvisor
from ..alignment.coarse_registration import AutoAligner
from ..alignment.error_estimation import AlignmentEstimator, AlignmentStatus, alignment_status
from ..alignment.rigid_transform import RigidTransform
from ..alignment.transform_io import load_transform_matrix, save_transform_matrix
from ..preprocessing.datasets import DatasetType, build_dataset
from ..preprocessing.loader import PointCloudLoader, PointCloudLoadError
from ..utils.config import AppConfig
from ..utils.coordinate_transform import Recenterer, WorldOffset
from ..utils.logging import setup_logger
from ..utils.point_set import PointSet
from ..visualization.scene import CameraPlacement, SceneFitter, SliderRanges

logger = setup_logger(__name__)

EMPTY_UPLOAD_MESSAGE = "File contains no point data."


class RegistrationSession:
    """
    State and operations of one interactive alignment session.

    Args:
        config: Application configuration (defaults when None)
        rng: Generator or seed shared by the RMSE estimator and synthetic datasets
        loader: File loader; replaceable in tests
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        rng: Union[np.random.Generator, int, None] = None,
        loader: Optional[PointCloudLoader] = None,
    ):
        self.config = config or AppConfig()
        self.rng = np.random.default_rng(
            rng if rng is not None else self.config.alignment.rmse.seed
        )
        self.loader = loader or PointCloudLoader()
        self.estimator = AlignmentEstimator.from_config(self.config.alignment, rng=self.rng)
        self.recenterer = Recenterer()
        self.auto_aligner = AutoAligner()
        self.scene = SceneFitter.from_config(self.config.scene)

        self.dataset = DatasetType.EMPTY
        self.source = PointSet.empty()
        self.target = PointSet.empty()
        self.world = WorldOffset()
        self.transform = RigidTransform.identity()
        self.advisory_text: Optional[str] = None
        self.error_message: Optional[str] = None

    # ----------------- Datasets -----------------
    def select_dataset(self, kind: DatasetType) -> None:
        """Switch to a synthetic dataset, or clear the scene with EMPTY."""
        kind = DatasetType(kind)
        if kind == DatasetType.CUSTOM:
            # Custom content only comes from uploads
            return
        if kind == DatasetType.EMPTY:
            self.clear()
            return

        data = build_dataset(kind, self.rng)
        self.dataset = kind
        self.source = data.source
        self.target = data.target
        # Synthetic datasets are generated around the origin already
        self.world.clear()
        self.scene.reset_scale()
        self.transform = RigidTransform(position=data.initial_offset)
        self.advisory_text = None
        self.error_message = None
        logger.info(
            "Selected %s dataset (%d source / %d target points)",
            kind.value, self.source.count, self.target.count,
        )
        self.scene.fit(self.source, self.target)

    def clear(self) -> None:
        """Drop both clouds and the world offset; sliders return to the minimum range."""
        self.dataset = DatasetType.EMPTY
        self.source = PointSet.empty()
        self.target = PointSet.empty()
        self.world.clear()
        self.scene.reset_scale()
        logger.info("Scene cleared")

    # ----------------- Uploads -----------------
    def upload_points(self, points, *, is_source: bool) -> bool:
        """
        Ingest an uploaded coordinate buffer as the source or target cloud.

        Returns:
            True on success; False when the buffer is empty, in which case
            ``error_message`` is set and both clouds stay unchanged.
        """
        self.error_message = None
        self.dataset = DatasetType.CUSTOM
        raw = PointSet(points)
        if raw.is_empty:
            self.error_message = EMPTY_UPLOAD_MESSAGE
            logger.warning("Upload rejected: %s", EMPTY_UPLOAD_MESSAGE)
            return False

        centered = self.recenterer.ingest(raw, self.world)
        self.scene.expand_scale(centered.bounding_radius())

        role = "source" if is_source else "target"
        if is_source:
            self.source = centered
            # New source starts from the identity pose
            self.transform = RigidTransform.identity()
        else:
            self.target = centered
        self.advisory_text = None
        logger.info("Uploaded %s cloud with %d points (scene scale %.3f)",
                    role, centered.count, self.scene.scene_scale)
        self.scene.fit(self.source, self.target)
        return True

    def upload_file(self, file_path: Union[str, Path], *, is_source: bool) -> bool:
        """Load a point cloud file and ingest it; load failures set ``error_message``."""
        try:
            points = self.loader.load(file_path)
        except PointCloudLoadError as e:
            self.error_message = str(e)
            logger.error(f"Failed to upload {file_path}: {e}")
            return False
        return self.upload_points(points, is_source=is_source)

    # ----------------- Transform -----------------
    def set_transform(self, transform: RigidTransform) -> None:
        self.transform = transform

    def set_position(self, position: Sequence[float]) -> None:
        self.transform = self.transform.with_position(position)

    def set_rotation(self, rotation: Sequence[float]) -> None:
        self.transform = self.transform.with_rotation(rotation)

    def set_axis(self, field_name: str, axis: int, value: float) -> None:
        """Single slider update, e.g. ``set_axis("rotation", 2, 0.5)``."""
        self.transform = self.transform.with_axis(field_name, axis, value)

    def reset_transform(self) -> None:
        self.transform = RigidTransform.identity()

    def save_transform(self, output_file: Union[str, Path]) -> None:
        save_transform_matrix(self.transform, output_file)

    def load_transform(self, input_file: Union[str, Path]) -> None:
        """Replace the pose with one saved by ``save_transform``."""
        self.transform = load_transform_matrix(input_file)

    def auto_align(self) -> bool:
        """
        Move the source so both centroids coincide.

        Returns:
            False (and leaves the pose alone) unless both clouds are loaded.
        """
        if self.source.is_empty or self.target.is_empty:
            logger.info("Auto-align skipped: both source and target must be loaded")
            return False
        self.transform = self.auto_aligner.align(self.source, self.target, self.transform)
        return True

    # ----------------- Feedback -----------------
    @property
    def has_data(self) -> bool:
        return not (self.source.is_empty or self.target.is_empty)

    @property
    def rmse(self) -> float:
        """Fresh stochastic RMSE estimate for the current pose."""
        if not self.has_data:
            return 0.0
        return self.estimator.estimate(self.source, self.target, self.transform)

    def alignment_status(self, rmse: Optional[float] = None) -> AlignmentStatus:
        value = self.rmse if rmse is None else rmse
        return alignment_status(
            value,
            self.scene.slider_range,
            tolerance_fraction=self.config.alignment.status_tolerance_fraction,
            has_data=self.has_data,
        )

    def slider_ranges(self) -> SliderRanges:
        return self.scene.slider_ranges()

    @property
    def camera(self) -> Optional[CameraPlacement]:
        return self.scene.camera

    def request_advice(self, advisor: Optional[RegistrationAdvisor] = None) -> str:
        """Ask the advisory service about the current pose and keep the answer."""
        advisor = advisor or RegistrationAdvisor.from_config(self.config.advisory)
        self.advisory_text = advisor.analyze(self.source, self.target, self.transform)
        return self.advisory_text
