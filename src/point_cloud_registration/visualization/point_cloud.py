"""
Registration Scene Visualization

Draws the fixed target and the posed source cloud. Unlike the alignment error,
the rendered source includes the transform's uniform scale.
"""

from typing import Optional
import numpy as np
import plotly.graph_objects as go
import pyvista as pv

from ..alignment.rigid_transform import RigidTransform, apply_transform_for_display
from ..utils.point_set import PointSet, as_point_array
from .scene import CameraPlacement

# Optional Qt-based interactive plotter
try:
    from pyvistaqt import BackgroundPlotter  # type: ignore
except Exception:  # pragma: no cover
    BackgroundPlotter = None  # type: ignore


class PointCloudVisualizer:
    """Render source (moving) and target (fixed) clouds with plotly or pyvista."""

    def __init__(
        self,
        backend: str = 'plotly',
        *,
        source_color: str = '#38bdf8',
        target_color: str = '#f472b6',
        background_color: str = '#0f172a',
        point_size: float = 2.0,
        rng=None,
    ):
        """
        Args:
            backend: 'plotly', 'pyvista', or 'pyvistaqt'
            source_color: Colour of the moving cloud
            target_color: Colour of the fixed cloud
            background_color: Scene background
            point_size: Marker size in pixels
            rng: Generator or seed used for display downsampling
        """
        if backend not in ['plotly', 'pyvista', 'pyvistaqt']:
            raise ValueError(
                f"Unsupported backend: '{backend}'. Choose 'plotly', 'pyvista', or 'pyvistaqt'."
            )
        self.backend = backend
        self.source_color = source_color
        self.target_color = target_color
        self.background_color = background_color
        self.point_size = point_size
        self.rng = np.random.default_rng(rng)

    @classmethod
    def from_config(cls, cfg, rng=None) -> "PointCloudVisualizer":
        return cls(
            cfg.backend,
            source_color=cfg.source_color,
            target_color=cfg.target_color,
            background_color=cfg.background_color,
            point_size=cfg.point_size,
            rng=rng,
        )

    # ----------------- Public API -----------------
    def visualize_registration(
        self,
        source: PointSet,
        target: PointSet,
        transform: RigidTransform,
        *,
        camera: Optional[CameraPlacement] = None,
        sample_size: Optional[int] = None,
        title: str = "Point Cloud Registration",
    ):
        src, tgt = self._display_points(source, target, transform, sample_size)
        if self.backend == 'plotly':
            fig = self._plotly_figure(src, tgt, camera, title)
            fig.show(renderer="browser")
            return
        self._visualize_pyvista(src, tgt, camera)

    def build_figure(
        self,
        source: PointSet,
        target: PointSet,
        transform: RigidTransform,
        *,
        camera: Optional[CameraPlacement] = None,
        sample_size: Optional[int] = None,
        title: str = "Point Cloud Registration",
    ) -> go.Figure:
        """Plotly figure of the scene, without showing it."""
        src, tgt = self._display_points(source, target, transform, sample_size)
        return self._plotly_figure(src, tgt, camera, title)

    # ----------------- Internal helpers -----------------
    def _display_points(self, source, target, transform, sample_size):
        src = as_point_array(source)
        tgt = as_point_array(target)
        if sample_size:
            src = self._downsample(src, sample_size)
            tgt = self._downsample(tgt, sample_size)
        # Render path applies scale, unlike the RMSE path
        src = apply_transform_for_display(src, transform)
        return src, tgt

    def _downsample(self, point_cloud: np.ndarray, sample_size: int) -> np.ndarray:
        if sample_size >= len(point_cloud):
            return point_cloud
        indices = self.rng.choice(len(point_cloud), sample_size, replace=False)
        return point_cloud[indices]

    def _plotly_figure(self, src: np.ndarray, tgt: np.ndarray, camera: Optional[CameraPlacement], title: str) -> go.Figure:
        fig = go.Figure()
        for pc, name, color, opacity in (
            (src, "Source (Moving)", self.source_color, 1.0),
            (tgt, "Target (Fixed)", self.target_color, 0.6),
        ):
            if len(pc) == 0:
                continue
            fig.add_trace(go.Scatter3d(
                x=pc[:, 0], y=pc[:, 1], z=pc[:, 2],
                mode='markers',
                marker=dict(size=self.point_size, color=color, opacity=opacity),
                name=name,
            ))
        scene = dict(
            xaxis=dict(visible=False), yaxis=dict(visible=False), zaxis=dict(visible=False),
            aspectmode='data',
            bgcolor=self.background_color,
        )
        fig.update_layout(title=title, scene=scene, paper_bgcolor=self.background_color,
                          margin=dict(l=0, r=0, t=40, b=0))
        if camera is not None:
            fig.update_layout(scene_camera=self._plotly_camera(src, tgt, camera))
        return fig

    @staticmethod
    def _plotly_camera(src: np.ndarray, tgt: np.ndarray, camera: CameraPlacement) -> dict:
        # Plotly expects eye/center in normalized scene coordinates around the data box
        non_empty = [p for p in (src, tgt) if len(p)]
        pts = np.vstack(non_empty) if non_empty else np.zeros((1, 3))
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        mid = 0.5 * (lo + hi)
        half = float(np.max(hi - lo)) / 2.0 or 1.0

        def norm(v):
            v = (np.asarray(v) - mid) / half
            return dict(x=float(v[0]), y=float(v[1]), z=float(v[2]))

        return dict(eye=norm(camera.position), center=norm(camera.target), up=dict(x=0, y=0, z=1))

    def _get_plotter(self):
        if self.backend == 'pyvistaqt':
            if BackgroundPlotter is None:
                raise ImportError("pyvistaqt is not installed. Install with 'pip install pyvistaqt PySide6'.")
            return BackgroundPlotter()
        return pv.Plotter()

    def _visualize_pyvista(self, src: np.ndarray, tgt: np.ndarray, camera: Optional[CameraPlacement]):
        plotter = self._get_plotter()
        plotter.set_background(self.background_color)
        for pc, name, color, opacity in (
            (src, "Source (Moving)", self.source_color, 1.0),
            (tgt, "Target (Fixed)", self.target_color, 0.6),
        ):
            if len(pc) == 0:
                continue
            plotter.add_mesh(
                pv.PolyData(pc),
                label=name,
                color=color,
                opacity=opacity,
                render_points_as_spheres=False,
                point_size=self.point_size * 1.5,
                lighting=False,
            )
        plotter.add_legend()
        if camera is not None:
            plotter.camera_position = [camera.position, camera.target, (0.0, 0.0, 1.0)]
        plotter.show()
