"""FastAPI dependencies for API endpoints."""

from fastapi import Request

from vendoriq.risk.engine import RiskIntelligenceEngine

__all__ = [
    "get_risk_engine",
]


def get_risk_engine(request: Request) -> RiskIntelligenceEngine:
    """Get the risk intelligence engine attached to the application.

    The engine is created by ``create_app`` (or its lifespan when backed
    by the database) and stored on ``app.state.risk_engine``.

    Raises:
        RuntimeError: If the application has no engine configured
    """
    engine = getattr(request.app.state, "risk_engine", None)
    if engine is None:
        raise RuntimeError("Risk intelligence engine is not configured")
    return engine
