"""FastAPI application serving a trained RBF surrogate over HTTP."""

import logging
import os
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from rbf_surrogate.factory import SurrogateFactory

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------
_factory: Optional[SurrogateFactory] = None
# updates rebuild the surrogate in place; predictions must not overlap them
_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the model on startup; clean up on shutdown."""
    global _factory
    model_path = os.environ.get("SURROGATE_MODEL_PATH", "model.pkl")
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    model_file = Path(model_path)
    if model_file.exists():
        logger.info("Loading model from %s", model_file)
        _factory = SurrogateFactory.load_model(model_file)
        logger.info("Model ready (%r).", _factory.surrogate)
    else:
        _factory = None
        logger.warning("Model file not found at %s. /predict will return 503.", model_file)
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="RBF Surrogate API",
    description="REST API for radial basis function surrogate predictions and updates.",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------
class PredictionRequest(BaseModel):
    """Query points for prediction."""

    points: List[Union[float, List[float]]] = Field(
        ...,
        description="Query points: scalars for 1-D inputs, lists of length d otherwise.",
        examples=[[[1.0, 2.5], [3.0, 0.5]]],
    )


class PredictionResponse(BaseModel):
    """One prediction per query point."""

    predictions: List[Union[float, List[float]]] = Field(
        ...,
        description="Scalars when the surrogate was trained on scalar outputs, lists otherwise.",
    )


class UpdateRequest(BaseModel):
    """New samples to absorb into the surrogate."""

    points: List[Union[float, List[float]]]
    values: List[Union[float, List[float]]]


class UpdateResponse(BaseModel):
    num_samples: int


class HealthResponse(BaseModel):
    status: str
    model_loaded: bool
    num_samples: Optional[int] = None


def _require_factory() -> SurrogateFactory:
    if _factory is None or _factory.surrogate is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Model not loaded. Set SURROGATE_MODEL_PATH and restart.",
        )
    return _factory


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@app.get("/healthz", response_model=HealthResponse, tags=["ops"])
async def health_check() -> HealthResponse:
    """Kubernetes liveness / readiness probe."""
    loaded = _factory is not None and _factory.surrogate is not None
    return HealthResponse(
        status="ok" if loaded else "no_model",
        model_loaded=loaded,
        num_samples=_factory.surrogate.num_samples if loaded else None,
    )


@app.post(
    "/predict",
    response_model=PredictionResponse,
    status_code=status.HTTP_200_OK,
    tags=["inference"],
)
def predict(request: PredictionRequest) -> PredictionResponse:
    """Evaluate the surrogate at every query point."""
    factory = _require_factory()

    try:
        with _lock:
            predictions = [factory.surrogate(point) for point in request.points]
    except (ValueError, np.linalg.LinAlgError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return PredictionResponse(
        predictions=[p if isinstance(p, float) else list(p) for p in predictions]
    )


@app.post("/points", response_model=UpdateResponse, tags=["update"])
def add_points(request: UpdateRequest) -> UpdateResponse:
    """Add new samples and refit the surrogate."""
    factory = _require_factory()

    try:
        with _lock:
            factory.surrogate.add_points(request.points, request.values)
            num_samples = factory.surrogate.num_samples
    except (ValueError, np.linalg.LinAlgError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    logger.info("Surrogate updated, %d samples", num_samples)
    return UpdateResponse(num_samples=num_samples)


@app.get("/model/info", tags=["info"])
async def model_info() -> Dict[str, Any]:
    """Return metadata about the loaded model."""
    factory = _require_factory()
    surrogate = factory.surrogate
    return {
        "num_samples": surrogate.num_samples,
        "input_dim": surrogate.dim,
        "output_dim": surrogate.output_dim,
        "polynomial_degree": surrogate.degree,
        "scale_factor": surrogate.scale_factor,
        "storage_mode": surrogate.storage.name,
        "feature_names": factory.feature_names,
        "lower_bounds": surrogate.lb.tolist(),
        "upper_bounds": surrogate.ub.tolist(),
    }
