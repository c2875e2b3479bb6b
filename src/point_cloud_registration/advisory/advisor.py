"""
Registration Advisory

Asks a hosted language model (Gemini through ``google-genai``) for a short
textual assessment of the current alignment. The payload is deliberately
small: both centroids, the current pose and a handful of sample points from
each cloud, never the full clouds.

Service failures, including a missing API key, never propagate: they are
logged and replaced by a fixed fallback message.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from ..alignment.rigid_transform import RigidTransform
from ..utils.logging import setup_logger
from ..utils.point_set import PointSet

logger = setup_logger(__name__)

FALLBACK_MESSAGE = (
    "Error connecting to AI analysis service. Please check your API key or connection."
)
EMPTY_RESPONSE_MESSAGE = "No analysis generated."

PROMPT_TEMPLATE = """
You are an expert 3D Geometry and Computer Vision Engineer.
I am performing a rigid point cloud registration task.

Data Statistics:
- Source Point Cloud Centroid (Initial): [{source_centroid}]
- Target Point Cloud Centroid: [{target_centroid}]
- Current Applied Transform: Position [{position}], Rotation [{rotation}]

Source Sample Points (First {n_source}): {source_sample}
Target Sample Points (First {n_target}): {target_sample}

Task:
1. Analyze the spatial relationship based on the centroids.
2. Comment on the alignment quality (Are they close? Is there a large offset?).
3. Provide a recommendation for the next step in registration (e.g., "Move X by +5 units", "Rotate Z axis").
4. Keep the response concise, professional, and technical (under {max_words} words).
"""


class AdvisoryError(RuntimeError):
    """Raised inside the advisor when the service cannot be reached."""


@dataclass(frozen=True)
class AdvisoryLine:
    """One display line of an advisory response."""

    text: str
    bullet: bool = False
    paragraph_break: bool = False


def _format_vector(values) -> str:
    return ", ".join(f"{float(v):g}" for v in values)


def _format_sample(points: np.ndarray) -> str:
    return " ".join(f"[{p[0]:.2f},{p[1]:.2f},{p[2]:.2f}]" for p in points)


def build_prompt(
    source: PointSet,
    target: PointSet,
    transform: RigidTransform,
    *,
    sample_points: int = 5,
    max_words: int = 150,
) -> str:
    """
    Natural-language prompt describing the registration state.

    At most ``sample_points`` points of each cloud are included.
    """
    src_sample = source.sample(sample_points)
    tgt_sample = target.sample(sample_points)
    return PROMPT_TEMPLATE.format(
        source_centroid=_format_vector(source.centroid()),
        target_centroid=_format_vector(target.centroid()),
        position=_format_vector(transform.position),
        rotation=_format_vector(transform.rotation),
        n_source=len(src_sample),
        n_target=len(tgt_sample),
        source_sample=_format_sample(src_sample),
        target_sample=_format_sample(tgt_sample),
        max_words=max_words,
    )


def _default_client_factory(api_key: str):
    from google import genai

    return genai.Client(api_key=api_key)


class RegistrationAdvisor:
    """
    Text advisory for the current alignment.

    Args:
        model: Model name passed to ``generate_content``
        api_key: Explicit key; falls back to the ``api_key_env`` environment variable
        api_key_env: Environment variable holding the key
        sample_points: Points from each cloud included in the prompt
        max_words: Word budget requested from the model
        client_factory: Callable ``api_key -> client``; replaceable in tests
    """

    def __init__(
        self,
        model: str = "gemini-2.5-flash",
        *,
        api_key: Optional[str] = None,
        api_key_env: str = "API_KEY",
        sample_points: int = 5,
        max_words: int = 150,
        client_factory: Optional[Callable[[str], object]] = None,
    ):
        self.model = model
        self.api_key = api_key
        self.api_key_env = api_key_env
        self.sample_points = sample_points
        self.max_words = max_words
        self.client_factory = client_factory or _default_client_factory

    @classmethod
    def from_config(cls, cfg, **kwargs) -> "RegistrationAdvisor":
        return cls(
            cfg.model,
            api_key_env=cfg.api_key_env,
            sample_points=cfg.sample_points,
            max_words=cfg.max_words,
            **kwargs,
        )

    def _get_client(self):
        api_key = self.api_key or os.environ.get(self.api_key_env)
        if not api_key:
            logger.error(f"API key not found in environment variable {self.api_key_env}")
            raise AdvisoryError("API Key missing")
        return self.client_factory(api_key)

    def analyze(self, source: PointSet, target: PointSet, transform: RigidTransform) -> str:
        """
        Request an assessment of the current alignment.

        Returns:
            The model's text, EMPTY_RESPONSE_MESSAGE for a blank answer, or
            FALLBACK_MESSAGE when the service call fails for any reason.
        """
        try:
            client = self._get_client()
            prompt = build_prompt(
                source, target, transform,
                sample_points=self.sample_points,
                max_words=self.max_words,
            )
            response = client.models.generate_content(model=self.model, contents=prompt)
            text = getattr(response, "text", None)
            return text if text else EMPTY_RESPONSE_MESSAGE
        except Exception as e:
            logger.error(f"Advisory analysis error: {e}")
            return FALLBACK_MESSAGE


def format_advisory(text: str) -> List[AdvisoryLine]:
    """
    Split advisory text into display lines.

    Blank lines become paragraph breaks and lines starting with '-' become
    indented bullets; nothing else is interpreted.
    """
    lines: List[AdvisoryLine] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            lines.append(AdvisoryLine("", paragraph_break=True))
        elif line.startswith("-"):
            lines.append(AdvisoryLine(line, bullet=True))
        else:
            lines.append(AdvisoryLine(line))
    return lines
