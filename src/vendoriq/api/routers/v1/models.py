"""Heuristic model registry endpoints."""

from fastapi import APIRouter

from vendoriq.api.schemas.risk import (
    ModelInfoResponse,
    ModelListResponse,
    ModelPerformanceResponse,
)
from vendoriq.risk.models import get_active_models, get_model_performance

router = APIRouter(prefix="/models", tags=["models"])


@router.get(
    "",
    response_model=ModelListResponse,
    summary="List active models",
)
async def list_models() -> ModelListResponse:
    """List the active heuristic models."""
    models = [ModelInfoResponse.model_validate(m.to_dict()) for m in get_active_models()]
    return ModelListResponse(models=models, total=len(models))


@router.get(
    "/{model_id}/performance",
    response_model=ModelPerformanceResponse,
    summary="Get model performance",
    responses={
        404: {"description": "Model not found"},
    },
)
async def get_performance(model_id: str) -> ModelPerformanceResponse:
    """Reported quality figures of a model."""
    return ModelPerformanceResponse.model_validate(get_model_performance(model_id).to_dict())
