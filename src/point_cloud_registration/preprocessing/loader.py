"""
Point Cloud File Loader

This module turns point cloud files into flat float64 coordinate buffers.
Only positions are extracted; colours, normals and other attributes are
ignored.

Supported formats:
- PLY (ASCII and binary) via plyfile
- PCD (ASCII, binary and binary_compressed) via Open3D
- LAS/LAZ via laspy
"""

from __future__ import annotations

import io
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

import laspy
import numpy as np
from plyfile import PlyData

from ..utils.logging import setup_logger

logger = setup_logger(__name__)

SUPPORTED_EXTENSIONS = (".ply", ".pcd", ".las", ".laz")


class PointCloudLoadError(ValueError):
    """Raised when a file cannot be turned into a coordinate buffer.

    Attributes:
        reason: One of 'not_found', 'unsupported_format', 'no_position_data',
            'corrupted', 'empty'
    """

    def __init__(self, message: str, reason: str = "corrupted"):
        super().__init__(message)
        self.reason = reason


class PointCloudLoader:
    """
    Load point positions from PLY, PCD or LAS/LAZ files.

    Every successful load returns a 1-D float64 array of length 3N.
    Failures raise PointCloudLoadError with a user-facing message.
    """

    def load(self, file_path: Union[str, Path]) -> np.ndarray:
        """
        Load a point cloud file from disk.

        Args:
            file_path: Path to the point cloud file

        Returns:
            Flat float64 buffer [x0, y0, z0, x1, ...]

        Raises:
            PointCloudLoadError: If the file is missing, unsupported or invalid
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise PointCloudLoadError(f"File not found: {file_path}", reason="not_found")

        logger.info(f"Loading point cloud data from {file_path}")
        with file_path.open("rb") as fh:
            return self._parse(fh, file_path.name, file_path)

    def load_bytes(self, data: bytes, filename: str) -> np.ndarray:
        """Parse an in-memory upload; ``filename`` selects the format by extension."""
        if not data:
            raise PointCloudLoadError("Failed to read file", reason="empty")
        return self._parse(io.BytesIO(data), filename)

    # ----------------- Dispatch -----------------
    def _parse(self, stream: BinaryIO, filename: str, file_path: Optional[Path] = None) -> np.ndarray:
        extension = Path(filename).suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise PointCloudLoadError(
                f"Unsupported file extension: {extension or '(none)'}. "
                f"Please use {', '.join(SUPPORTED_EXTENSIONS)}",
                reason="unsupported_format",
            )

        try:
            if extension == ".ply":
                points = self._read_ply(stream)
            elif extension == ".pcd":
                points = self._read_pcd(stream, file_path)
            else:
                points = self._read_las(stream)
        except (PointCloudLoadError, ImportError):
            raise
        except Exception as e:
            logger.error(f"Parse error in {filename}: {e}")
            raise PointCloudLoadError(
                "Failed to parse point cloud data. File may be corrupted or format unsupported.",
                reason="corrupted",
            ) from e

        flat = np.ascontiguousarray(points, dtype=np.float64).reshape(-1)
        logger.info(f"Loaded {flat.size // 3} points from {filename}")
        return flat

    # ----------------- PLY -----------------
    def _read_ply(self, stream: BinaryIO) -> np.ndarray:
        ply = PlyData.read(stream)
        names = [el.name for el in ply.elements]
        if "vertex" not in names:
            raise PointCloudLoadError("No position data found in PLY file", reason="no_position_data")
        vertex = ply["vertex"]
        props = {p.name for p in vertex.properties}
        if not {"x", "y", "z"} <= props:
            raise PointCloudLoadError("No position data found in PLY file", reason="no_position_data")
        data = vertex.data
        return np.column_stack([
            np.asarray(data["x"], dtype=np.float64),
            np.asarray(data["y"], dtype=np.float64),
            np.asarray(data["z"], dtype=np.float64),
        ])

    # ----------------- PCD -----------------
    def _read_pcd(self, stream: BinaryIO, file_path: Optional[Path] = None) -> np.ndarray:
        try:
            import open3d as o3d  # type: ignore
        except Exception as e:
            raise ImportError("Open3D is required to read PCD files") from e

        if file_path is not None:
            cloud = o3d.io.read_point_cloud(str(file_path), format="pcd")
        else:
            # Open3D only reads from disk; spill in-memory uploads to a temp file
            with tempfile.TemporaryDirectory() as tmp:
                tmp_path = Path(tmp) / "upload.pcd"
                tmp_path.write_bytes(stream.read())
                cloud = o3d.io.read_point_cloud(str(tmp_path), format="pcd")

        # Open3D returns an empty cloud when x/y/z are missing or unreadable
        if not cloud.has_points():
            raise PointCloudLoadError("No position data found in PCD file", reason="no_position_data")
        return np.asarray(cloud.points, dtype=np.float64)

    # ----------------- LAS/LAZ -----------------
    def _read_las(self, stream: BinaryIO) -> np.ndarray:
        las = laspy.read(stream)
        return np.column_stack([
            np.asarray(las.x, dtype=np.float64),
            np.asarray(las.y, dtype=np.float64),
            np.asarray(las.z, dtype=np.float64),
        ])
