"""Default windows and thresholds for the analytics reports."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalyticsConfig:
    """
    Defaults used when running the full analytics report.

    Each engine function also carries these as keyword defaults, so the
    config only matters to callers that go through ``run_analytics``.
    """

    forecast_days: int = 30
    turnover_period_days: int = 90
    dead_stock_days: int = 90
    lead_time_days: int = 7
    service_level: float = 0.95  # Accepted, z-score stays at 1.65
    top_returns_limit: int = 5

    def __post_init__(self):
        for name in (
            "forecast_days",
            "turnover_period_days",
            "dead_stock_days",
            "top_returns_limit",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.lead_time_days < 0:
            raise ValueError(f"lead_time_days must be >= 0, got {self.lead_time_days}")
