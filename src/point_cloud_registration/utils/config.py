"""
Configuration management for point-cloud-registration.

Provides a typed pydantic model and YAML loader with sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Literal, Any, Dict

from pydantic import BaseModel, Field, ValidationError
import yaml


# -----------------------
# Typed config structures
# -----------------------


class RMSEConfig(BaseModel):
    source_samples: int = Field(default=100, description="Maximum source points drawn per RMSE estimate")
    target_checks: int = Field(default=200, description="Target points checked per source sample")
    seed: Optional[int] = Field(default=None, description="Seed for the estimator RNG (None = nondeterministic)")


class AlignmentConfig(BaseModel):
    rmse: RMSEConfig = Field(default_factory=RMSEConfig)
    status_tolerance_fraction: float = Field(
        default=0.05,
        description="RMSE below this fraction of the translation slider range reports 'Aligned'",
    )


class SceneConfig(BaseModel):
    min_scale: float = Field(default=10.0, description="Lower bound of the working scene radius")
    camera_distance_factor: float = Field(default=2.5, description="Camera offset per axis, in bounding radii")
    slider_steps: int = Field(default=200, description="Number of steps across the translation slider half-range")
    rotation_step: float = Field(default=0.1, description="Rotation slider step (radians)")


class AdvisoryConfig(BaseModel):
    enabled: bool = Field(default=True)
    model: str = Field(default="gemini-2.5-flash")
    api_key_env: str = Field(default="API_KEY", description="Environment variable holding the API key")
    sample_points: int = Field(default=5, description="Points from each cloud included in the prompt")
    max_words: int = Field(default=150)


class VisualizationConfig(BaseModel):
    backend: Literal["plotly", "pyvista", "pyvistaqt"] = Field(default="plotly")
    sample_size: int = Field(default=50000)
    point_size: float = Field(default=2.0)
    source_color: str = Field(default="#38bdf8")
    target_color: str = Field(default="#f472b6")
    background_color: str = Field(default="#0f172a")


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    file: Optional[str] = Field(default=None)


class AppConfig(BaseModel):
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    scene: SceneConfig = Field(default_factory=SceneConfig)
    advisory: AdvisoryConfig = Field(default_factory=AdvisoryConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# -----------------------
# Loader
# -----------------------


def _project_root() -> Path:
    """
    Resolve the repository root directory.

    File is at: repo_root/src/point_cloud_registration/utils/config.py
    parents sequence:
      0 -> .../src/point_cloud_registration/utils
      1 -> .../src/point_cloud_registration
      2 -> .../src
      3 -> repo_root
    """
    return Path(__file__).resolve().parents[3]


def load_config(path: Optional[str | Path] = None, *, allow_missing: bool = True) -> AppConfig:
    """
    Load configuration from YAML into a typed AppConfig.

    Search order when path is None:
    1) repo_root/config/default.yaml
    2) if missing and allow_missing=True: return default AppConfig()

    Args:
        path: Explicit YAML file path.
        allow_missing: If True, returns defaults when file missing; otherwise raises.

    Returns:
        AppConfig instance
    """
    cfg_path: Path
    if path is None:
        cfg_path = _project_root() / "config" / "default.yaml"
    else:
        cfg_path = Path(path)

    if not cfg_path.exists():
        if allow_missing:
            return AppConfig()
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {cfg_path}: {e}")
