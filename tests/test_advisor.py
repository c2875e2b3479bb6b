"""
Tests for the registration advisory.

The hosted model is replaced by a fake client; no network access is needed.
"""

from types import SimpleNamespace

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent / "src"))

from point_cloud_registration.advisory.advisor import (
    EMPTY_RESPONSE_MESSAGE,
    FALLBACK_MESSAGE,
    RegistrationAdvisor,
    build_prompt,
    format_advisory,
)
from point_cloud_registration.alignment.rigid_transform import RigidTransform
from point_cloud_registration.utils.config import AdvisoryConfig
from point_cloud_registration.utils.point_set import PointSet


class _FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append((model, contents))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class _FakeClient:
    def __init__(self, models):
        self.models = models


def _advisor(models, **kwargs):
    keys = []

    def factory(api_key):
        keys.append(api_key)
        return _FakeClient(models)

    advisor = RegistrationAdvisor(client_factory=factory, **kwargs)
    return advisor, keys


def _clouds():
    source = PointSet(np.arange(60, dtype=float) + 0.5)
    target = PointSet.from_points((1.0, 1.0, 1.0), (2.0, 2.0, 2.0))
    return source, target


def test_prompt_caps_sample_points():
    source, target = _clouds()
    prompt = build_prompt(source, target, RigidTransform(position=(1, 2, 3)), sample_points=5)

    source_line = next(l for l in prompt.splitlines() if l.startswith("Source Sample Points"))
    target_line = next(l for l in prompt.splitlines() if l.startswith("Target Sample Points"))
    assert source_line.count("[") == 5
    assert "(First 5)" in source_line
    # Target only has two points
    assert target_line.count("[") == 2
    assert "[0.50,1.50,2.50]" in source_line
    # Sixth source point is not exposed
    assert "[15.50,16.50,17.50]" not in prompt
    assert "Position [1, 2, 3]" in prompt


def test_analyze_returns_model_text(monkeypatch):
    monkeypatch.setenv("API_KEY", "secret")
    models = _FakeModels(text="Move X by +5 units.")
    advisor, keys = _advisor(models, model="test-model")
    source, target = _clouds()

    assert advisor.analyze(source, target, RigidTransform.identity()) == "Move X by +5 units."
    assert keys == ["secret"]
    assert models.calls[0][0] == "test-model"
    assert "Target Point Cloud Centroid" in models.calls[0][1]


def test_missing_api_key_falls_back(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    models = _FakeModels(text="unused")
    advisor, keys = _advisor(models)
    source, target = _clouds()

    assert advisor.analyze(source, target, RigidTransform.identity()) == FALLBACK_MESSAGE
    assert keys == []
    assert models.calls == []


def test_service_error_falls_back():
    models = _FakeModels(error=ConnectionError("boom"))
    advisor, _ = _advisor(models, api_key="explicit")
    source, target = _clouds()
    assert advisor.analyze(source, target, RigidTransform.identity()) == FALLBACK_MESSAGE


def test_blank_response():
    advisor, _ = _advisor(_FakeModels(text=""), api_key="explicit")
    source, target = _clouds()
    assert advisor.analyze(source, target, RigidTransform.identity()) == EMPTY_RESPONSE_MESSAGE


def test_from_config_uses_custom_env(monkeypatch):
    monkeypatch.setenv("GEMINI_KEY", "from-env")
    cfg = AdvisoryConfig(api_key_env="GEMINI_KEY", sample_points=2, model="m")
    keys = []
    advisor = RegistrationAdvisor.from_config(
        cfg, client_factory=lambda key: keys.append(key) or _FakeClient(_FakeModels(text="ok"))
    )
    source, target = _clouds()

    assert advisor.analyze(source, target, RigidTransform.identity()) == "ok"
    assert keys == ["from-env"]
    assert advisor.sample_points == 2


def test_format_advisory():
    text = "Offset is large.\n\n- Move X by +5\n  - Rotate Z\nDone."
    lines = format_advisory(text)

    assert [l.text for l in lines] == ["Offset is large.", "", "- Move X by +5", "- Rotate Z", "Done."]
    assert lines[1].paragraph_break
    assert lines[2].bullet and lines[3].bullet
    assert not lines[0].bullet and not lines[4].bullet
