"""Unit tests for the heuristic model registry."""

import pytest

from vendoriq.core.exceptions import EntityNotFoundError
from vendoriq.risk.models import (
    MODEL_REGISTRY,
    MODELS_CALIBRATED_AT,
    get_active_models,
    get_model_performance,
)


def test_active_models() -> None:
    models = get_active_models()

    assert [m.model_id for m in models] == ["risk_prediction_v1", "anomaly_detection_v1"]
    assert all(m.is_active for m in models)


def test_model_info_to_dict() -> None:
    data = MODEL_REGISTRY["anomaly_detection_v1"].to_dict()

    assert data["model_name"] == "Anomaly Detection Model v1.0"
    assert data["accuracy"] == 0.82
    assert data["features"][0] == "response_patterns"
    assert data["last_trained"] == MODELS_CALIBRATED_AT.isoformat()


def test_model_performance() -> None:
    performance = get_model_performance("risk_prediction_v1")

    assert performance.accuracy == 0.87
    assert performance.precision == pytest.approx(0.8265)
    assert performance.recall == pytest.approx(0.8004)
    assert performance.f1_score == pytest.approx(0.8091)
    assert performance.last_evaluated == MODELS_CALIBRATED_AT


def test_unknown_model() -> None:
    with pytest.raises(EntityNotFoundError) as exc_info:
        get_model_performance("churn_v9")

    assert exc_info.value.entity_type == "model"
    assert exc_info.value.entity_id == "churn_v9"


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        MODEL_REGISTRY["new_model"] = MODEL_REGISTRY["risk_prediction_v1"]  # type: ignore[index]
