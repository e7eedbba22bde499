"""Risk scoring components.

Exports the pure computation components and domain types. The
repository-backed façade lives in ``vendoriq.risk.engine``.
"""

from vendoriq.risk.anomaly_detector import (
    AnomalyDetector,
    BehaviorMetrics,
    DetectorConfig,
    create_anomaly_detector,
)
from vendoriq.risk.factor_aggregator import (
    AggregatorConfig,
    FactorAggregator,
    create_factor_aggregator,
)
from vendoriq.risk.forecast import ForecastConfig, ForecastEngine, create_forecast_engine
from vendoriq.risk.models import MODEL_REGISTRY, get_active_models, get_model_performance
from vendoriq.risk.rating_aggregator import (
    RatingAggregator,
    RatingConfig,
    create_rating_aggregator,
)
from vendoriq.risk.scoring import score_to_risk_level
from vendoriq.risk.trend_analyzer import (
    PredictionHistory,
    TrendAnalyzer,
    TrendConfig,
    create_trend_analyzer,
)
from vendoriq.risk.types import (
    AnomalyDetection,
    AnomalyType,
    AssessmentStatus,
    AssessmentType,
    FactorAggregation,
    ForecastPoint,
    IndustryBenchmark,
    OverallTrend,
    PredictionFactor,
    RatingWeights,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
    RiskLevel,
    RiskPrediction,
    RiskTrends,
    Severity,
    TrendPoint,
    TrendWindow,
    VendorRating,
)

__all__ = [
    # Components
    "AnomalyDetector",
    "BehaviorMetrics",
    "DetectorConfig",
    "create_anomaly_detector",
    "AggregatorConfig",
    "FactorAggregator",
    "create_factor_aggregator",
    "ForecastConfig",
    "ForecastEngine",
    "create_forecast_engine",
    "RatingAggregator",
    "RatingConfig",
    "create_rating_aggregator",
    "PredictionHistory",
    "TrendAnalyzer",
    "TrendConfig",
    "create_trend_analyzer",
    # Models
    "MODEL_REGISTRY",
    "get_active_models",
    "get_model_performance",
    # Types
    "AnomalyDetection",
    "AnomalyType",
    "AssessmentStatus",
    "AssessmentType",
    "FactorAggregation",
    "ForecastPoint",
    "IndustryBenchmark",
    "OverallTrend",
    "PredictionFactor",
    "RatingWeights",
    "RiskAssessment",
    "RiskCategory",
    "RiskFactor",
    "RiskLevel",
    "RiskPrediction",
    "RiskTrends",
    "Severity",
    "TrendPoint",
    "TrendWindow",
    "VendorRating",
    "score_to_risk_level",
]
