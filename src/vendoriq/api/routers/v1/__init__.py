"""API v1 routers."""

from fastapi import APIRouter

from .models import router as models_router
from .risk import router as risk_router

# Create v1 router that includes all v1 endpoints
router = APIRouter(prefix="/v1")

router.include_router(risk_router)
router.include_router(models_router)

__all__ = ["router", "risk_router", "models_router"]
