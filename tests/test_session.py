"""
End-to-end tests for the interactive registration session.

Covers dataset switching, uploads with world-offset recentering, pose edits,
auto-alignment, RMSE feedback and the advisory hook.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent / "src"))

from point_cloud_registration.alignment.error_estimation import AlignmentStatus
from point_cloud_registration.alignment.rigid_transform import RigidTransform
from point_cloud_registration.pipeline.session import EMPTY_UPLOAD_MESSAGE, RegistrationSession
from point_cloud_registration.preprocessing.datasets import DatasetType
from point_cloud_registration.utils.point_set import PointSet


SOURCE_GLOBAL = np.array([[999.0, 1000.0, 0.0], [1001.0, 1000.0, 0.0]])
TARGET_GLOBAL = np.array([[1100.0, 1000.0, 0.0]])


@pytest.fixture
def session():
    return RegistrationSession(rng=7)


@pytest.fixture
def loaded(session):
    assert session.upload_points(SOURCE_GLOBAL, is_source=True)
    assert session.upload_points(TARGET_GLOBAL, is_source=False)
    return session


def test_new_session_is_empty(session):
    assert session.dataset == DatasetType.EMPTY
    assert session.source.is_empty and session.target.is_empty
    assert session.transform.is_identity
    assert session.rmse == 0.0
    assert session.alignment_status() == AlignmentStatus.UNKNOWN
    assert session.camera is None


def test_select_synthetic_dataset(session):
    session.select_dataset(DatasetType.SPHERE)

    assert session.dataset == DatasetType.SPHERE
    assert session.source.count == 2000
    assert session.target.count == 2000
    assert session.transform.position == (5.0, 3.0, -2.0)
    assert not session.world.is_set
    assert session.camera is not None
    assert session.rmse > 0.0


def test_custom_selection_is_ignored(session):
    session.select_dataset(DatasetType.CUBE)
    before = session.source

    session.select_dataset(DatasetType.CUSTOM)

    assert session.dataset == DatasetType.CUBE
    assert session.source is before


def test_select_empty_clears(loaded):
    assert loaded.scene.slider_range == pytest.approx(100.0)

    loaded.select_dataset(DatasetType.EMPTY)
    assert loaded.dataset == DatasetType.EMPTY
    assert loaded.source.is_empty and loaded.target.is_empty
    assert not loaded.world.is_set
    assert loaded.scene.slider_range == 10.0


def test_clear_shrinks_sliders_after_large_upload(session):
    session.upload_points(np.array([[0.0, 0.0, 0.0], [500.0, 0.0, 0.0]]), is_source=True)
    assert session.scene.slider_range == pytest.approx(250.0)

    session.clear()

    assert session.scene.slider_range == 10.0
    assert session.slider_ranges().translation.maximum == 10.0


def test_uploads_share_world_offset(loaded):
    assert loaded.dataset == DatasetType.CUSTOM
    assert loaded.world.offset == pytest.approx((1000.0, 1000.0, 0.0))
    assert loaded.source.centroid() == pytest.approx((0.0, 0.0, 0.0))
    # Second upload reuses the first offset instead of its own centroid
    assert loaded.target.centroid() == pytest.approx((100.0, 0.0, 0.0))


def test_empty_upload_is_rejected(loaded):
    source, target, offset = loaded.source, loaded.target, loaded.world.offset

    assert loaded.upload_points(np.empty(0), is_source=True) is False

    assert loaded.error_message == EMPTY_UPLOAD_MESSAGE
    assert loaded.source is source
    assert loaded.target is target
    assert loaded.world.offset == offset


def test_source_upload_resets_pose(loaded):
    loaded.set_position((1.0, 2.0, 3.0))
    loaded.set_axis("rotation", 2, 0.5)

    loaded.upload_points(SOURCE_GLOBAL + 5.0, is_source=True)

    assert loaded.transform.is_identity


def test_target_upload_keeps_pose(loaded):
    loaded.set_position((1.0, 2.0, 3.0))
    loaded.upload_points(TARGET_GLOBAL, is_source=False)
    assert loaded.transform.position == (1.0, 2.0, 3.0)


def test_scene_scale_only_grows(loaded):
    assert loaded.scene.slider_range == pytest.approx(100.0)

    loaded.upload_points(SOURCE_GLOBAL, is_source=True)
    assert loaded.scene.slider_range == pytest.approx(100.0)
    assert loaded.slider_ranges().translation.maximum == pytest.approx(100.0)


def test_switching_dataset_resets_scale(loaded):
    loaded.select_dataset(DatasetType.SPHERE)
    assert loaded.scene.slider_range == 10.0


def test_upload_file_with_bad_extension(tmp_path, session):
    path = tmp_path / "cloud.txt"
    path.write_text("1 2 3\n")

    assert session.upload_file(path, is_source=True) is False
    assert "Unsupported file extension" in session.error_message
    assert session.source.is_empty


def test_upload_file_reads_pcd(tmp_path, session):
    path = tmp_path / "cloud.pcd"
    pytest.importorskip("open3d")
    path.write_text(
        "VERSION 0.7\nFIELDS x y z\nSIZE 4 4 4\nTYPE F F F\nCOUNT 1 1 1\n"
        "WIDTH 2\nHEIGHT 1\nPOINTS 2\nDATA ascii\n2 0 0\n4 0 0\n"
    )
    assert session.upload_file(path, is_source=False) is True
    assert session.world.offset == pytest.approx((3.0, 0.0, 0.0))
    assert session.target.count == 2


def test_auto_align_requires_both_clouds(session):
    session.upload_points(SOURCE_GLOBAL, is_source=True)
    session.set_position((4.0, 0.0, 0.0))

    assert session.auto_align() is False
    assert session.transform.position == (4.0, 0.0, 0.0)


def test_auto_align_and_status(loaded):
    loaded.set_rotation((0.0, 0.0, 0.0))
    assert loaded.alignment_status() == AlignmentStatus.MISALIGNED

    assert loaded.auto_align() is True

    assert loaded.transform.position == pytest.approx((100.0, 0.0, 0.0))
    # Both source points end up exactly one unit from the single target point
    assert loaded.rmse == pytest.approx(1.0)
    assert loaded.alignment_status() == AlignmentStatus.ALIGNED


def test_auto_align_keeps_rotation(loaded):
    loaded.set_axis("rotation", 0, 0.3)
    loaded.auto_align()
    assert loaded.transform.rotation == (0.3, 0.0, 0.0)


def test_rmse_ignores_scale(loaded):
    loaded.auto_align()
    loaded.set_transform(RigidTransform(position=loaded.transform.position, scale=3.0))
    assert loaded.rmse == pytest.approx(1.0)


def test_reset_transform(loaded):
    loaded.set_position((1.0, 1.0, 1.0))
    loaded.reset_transform()
    assert loaded.transform == RigidTransform.identity()


def test_saved_transform_restores_pose(tmp_path, loaded):
    loaded.set_transform(RigidTransform(position=(3.0, -1.0, 2.0), rotation=(0.1, 0.2, 0.3), scale=1.25))
    saved = loaded.transform
    path = tmp_path / "pose.txt"

    loaded.save_transform(path)
    loaded.reset_transform()
    loaded.load_transform(path)

    assert loaded.transform.position == pytest.approx(saved.position)
    assert loaded.transform.rotation == pytest.approx(saved.rotation)
    assert loaded.transform.scale == pytest.approx(1.25)


def test_camera_refits_on_count_change(loaded):
    assert loaded.camera.target == pytest.approx((100.0, 0.0, 0.0))

    loaded.upload_points(np.vstack([TARGET_GLOBAL, TARGET_GLOBAL + 2.0]), is_source=False)
    assert loaded.camera.target == pytest.approx((101.0, 1.0, 1.0))


class _FakeAdvisor:
    def __init__(self):
        self.calls = []

    def analyze(self, source, target, transform):
        self.calls.append((source, target, transform))
        return "Rotate Z axis."


def test_request_advice(loaded):
    advisor = _FakeAdvisor()

    assert loaded.request_advice(advisor) == "Rotate Z axis."
    assert loaded.advisory_text == "Rotate Z axis."
    source, target, transform = advisor.calls[0]
    assert source is loaded.source and target is loaded.target
    assert transform == loaded.transform


def test_upload_clears_previous_advice(loaded):
    loaded.request_advice(_FakeAdvisor())
    loaded.upload_points(TARGET_GLOBAL, is_source=False)
    assert loaded.advisory_text is None


def test_session_points_are_read_only(loaded):
    with pytest.raises(ValueError):
        loaded.source.flat[0] = 1.0
    assert isinstance(loaded.source, PointSet)
