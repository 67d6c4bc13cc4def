"""Tests for the FastAPI prediction API."""

from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from fastapi.testclient import TestClient

from rbf_surrogate.factory import SurrogateFactory


@pytest.fixture()
def trained_factory(tmp_path: Path):
    """Train a small cubic-kernel factory and persist it."""
    X = np.random.default_rng(5).random((12, 2))
    y = X[:, 0] + 2 * X[:, 1]

    factory = SurrogateFactory("cubic")
    factory.set_data(X, y, feature_names=["a", "b"])
    factory.train(lower_bounds=[0.0, 0.0], upper_bounds=[1.0, 1.0])

    model_path = tmp_path / "model.pkl"
    factory.save_model(model_path)
    return model_path, X, y


@pytest.fixture()
def client(trained_factory):
    """Create a test client with the model loaded."""
    model_path, _, _ = trained_factory
    with patch.dict("os.environ", {"SURROGATE_MODEL_PATH": str(model_path)}):
        from rbf_surrogate.api.app import app

        with TestClient(app) as c:
            yield c


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["model_loaded"] is True
    assert body["num_samples"] == 12


def test_predict(client, trained_factory):
    _, X, y = trained_factory
    resp = client.post(
        "/predict",
        json={"points": [X[0].tolist(), [0.5, 0.5]]},
    )
    assert resp.status_code == 200
    predictions = resp.json()["predictions"]
    assert len(predictions) == 2
    assert predictions[0] == pytest.approx(y[0], abs=1e-8)
    assert predictions[1] == pytest.approx(1.5, abs=1e-6)


def test_predict_wrong_dimension(client):
    resp = client.post("/predict", json={"points": [[0.5, 0.5, 0.5]]})
    assert resp.status_code == 422


def test_add_points(client):
    resp = client.post("/points", json={"points": [[0.05, 0.95]], "values": [1.95]})
    assert resp.status_code == 200
    assert resp.json()["num_samples"] == 13

    resp = client.post("/predict", json={"points": [[0.05, 0.95]]})
    assert resp.json()["predictions"][0] == pytest.approx(1.95, abs=1e-8)


def test_add_duplicate_point(client, trained_factory):
    _, X, _ = trained_factory
    resp = client.post("/points", json={"points": [X[0].tolist()], "values": [0.0]})
    assert resp.status_code == 422


def test_model_info(client):
    resp = client.get("/model/info")
    assert resp.status_code == 200
    body = resp.json()
    assert body["input_dim"] == 2
    assert body["polynomial_degree"] == 1
    assert body["feature_names"] == ["a", "b"]


def test_no_model(tmp_path):
    with patch.dict("os.environ", {"SURROGATE_MODEL_PATH": str(tmp_path / "missing.pkl")}):
        from rbf_surrogate.api.app import app

        with TestClient(app) as c:
            assert c.get("/healthz").json()["model_loaded"] is False
            assert c.post("/predict", json={"points": [[0.5, 0.5]]}).status_code == 503
