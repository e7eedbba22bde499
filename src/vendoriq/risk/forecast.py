"""Forecast Engine for organization-level risk trends.

Builds a daily series of portfolio risk from stored risk assessments and
projects it forward with a least-squares line.
"""

from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta

from pydantic import BaseModel, Field

from vendoriq.core.logging import get_logger
from vendoriq.repository.records import RiskAssessmentRecord
from vendoriq.risk.scoring import clamp, mean, round_half_up, score_to_risk_level
from vendoriq.risk.types import (
    ForecastPoint,
    OverallTrend,
    RiskLevel,
    RiskTrends,
    TrendPoint,
    TrendWindow,
)

logger = get_logger(__name__)


class ForecastConfig(BaseModel):
    """Configuration for the forecast engine."""

    forecast_days: int = Field(default=30, ge=1, le=365, description="Days to project forward")
    interval_half_width: int = Field(
        default=10, ge=0, le=50, description="Half width of the forecast confidence interval"
    )
    comparison_days: int = Field(
        default=7, ge=1, le=14, description="Days in each slice of the overall trend comparison"
    )
    trend_threshold: float = Field(
        default=5.0, ge=0.0, le=100.0, description="Average change needed to leave stable"
    )


def linear_fit(values: Sequence[float]) -> tuple[float, float]:
    """Least-squares line through (index, value) points.

    Returns:
        (slope, intercept). A single point or flat x-range gives slope 0.
    """
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    x_mean = (n - 1) / 2
    y_mean = mean(values)
    denominator = sum((x - x_mean) ** 2 for x in range(n))
    if denominator == 0:
        return 0.0, y_mean
    numerator = sum((x - x_mean) * (y - y_mean) for x, y in enumerate(values))
    slope = numerator / denominator
    return slope, y_mean - slope * x_mean


class ForecastEngine:
    """Computes daily organization risk trends and a short-term forecast.

    Example:
        ```python
        engine = ForecastEngine()
        trends = engine.trends("org-1", TrendWindow.DAYS_30, records)
        print(trends.overall_trend, len(trends.forecast))
        ```
    """

    def __init__(self, config: ForecastConfig | None = None):
        """Initialize the forecast engine.

        Args:
            config: Forecast configuration.
        """
        self.config = config or ForecastConfig()

    def trends(
        self,
        organization_id: str,
        window: TrendWindow,
        records: Sequence[RiskAssessmentRecord],
        now: datetime | None = None,
    ) -> RiskTrends:
        """Build the trend series, forecast and overall direction.

        Args:
            organization_id: Organization the records belong to.
            window: Lookback window; one point per day.
            records: Risk assessment records of the organization, any order.
            now: Reference time; the series ends on its UTC date.

        Returns:
            RiskTrends with ``window.days`` trend points.
        """
        now = now or datetime.now(UTC)
        window = TrendWindow.parse(window)

        trend_data = self.daily_series(records, now.astimezone(UTC).date(), window.days)
        forecast = self.forecast(trend_data)
        overall = self.overall_trend(trend_data)

        logger.info(
            "Risk trends calculated",
            organization_id=organization_id,
            window=window.value,
            records=len(records),
            overall_trend=overall.value,
        )

        return RiskTrends(
            organization_id=organization_id,
            window=window,
            overall_trend=overall,
            trend_data=trend_data,
            forecast=forecast,
            generated_at=now,
        )

    def daily_series(
        self,
        records: Sequence[RiskAssessmentRecord],
        end: date,
        days: int,
    ) -> list[TrendPoint]:
        """Portfolio state at the end of each of ``days`` days ending on ``end``."""
        ordered = sorted(records, key=lambda r: r.created_at)
        latest: dict[str, float] = {}
        position = 0
        points: list[TrendPoint] = []

        for offset in range(days - 1, -1, -1):
            day = end - timedelta(days=offset)
            day_end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=UTC)

            while position < len(ordered) and ordered[position].created_at < day_end:
                record = ordered[position]
                latest[record.subject_id] = record.score
                position += 1

            scores = list(latest.values())
            levels = [score_to_risk_level(round_half_up(s)) for s in scores]
            points.append(
                TrendPoint(
                    date=day,
                    avg_score=round_half_up(mean(scores), 2),
                    high_count=levels.count(RiskLevel.HIGH),
                    critical_count=levels.count(RiskLevel.CRITICAL),
                )
            )

        return points

    def forecast(self, trend_data: Sequence[TrendPoint]) -> list[ForecastPoint]:
        """Project the trend line forward one point per day."""
        slope, intercept = linear_fit([p.avg_score for p in trend_data])
        last_date = trend_data[-1].date if trend_data else datetime.now(UTC).date()
        last_index = len(trend_data) - 1
        width = self.config.interval_half_width

        points: list[ForecastPoint] = []
        for step in range(1, self.config.forecast_days + 1):
            value = intercept + slope * (last_index + step)
            predicted = int(clamp(round_half_up(value)))
            points.append(
                ForecastPoint(
                    date=last_date + timedelta(days=step),
                    predicted_score=predicted,
                    confidence_interval=(predicted - width, predicted + width),
                )
            )
        return points

    def overall_trend(self, trend_data: Sequence[TrendPoint]) -> OverallTrend:
        """Compare the latest days against the days before them."""
        span = self.config.comparison_days
        recent = [p.avg_score for p in trend_data[-span:]]
        older = [p.avg_score for p in trend_data[-2 * span : -span]]
        if not recent or not older:
            return OverallTrend.STABLE

        recent_avg = mean(recent)
        older_avg = mean(older)
        if recent_avg < older_avg - self.config.trend_threshold:
            return OverallTrend.IMPROVING
        if recent_avg > older_avg + self.config.trend_threshold:
            return OverallTrend.DETERIORATING
        return OverallTrend.STABLE


def create_forecast_engine(config: ForecastConfig | None = None) -> ForecastEngine:
    """Create a forecast engine.

    Args:
        config: Optional forecast configuration.

    Returns:
        Configured ForecastEngine.
    """
    return ForecastEngine(config=config)
