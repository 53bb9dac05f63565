"""
Demand forecasting from sales history.

Fits an ordinary least-squares line through daily sales totals and projects
the next period. The output is a planning aid for a single small business,
not a calibrated statistical forecast.
"""

import logging
import math
import numpy as np
import pandas as pd

from .models import PredictiveAnalytics
from .schema import genuine_sales, round_half_up, sort_by_timestamp

logger = logging.getLogger(__name__)

MIN_SALES_FOR_FORECAST = 3
REORDER_BUFFER = 1.5  # 50% on top of base demand
TREND_WINDOW = 7


def _classify_trend(daily_qty: np.ndarray) -> str:
    """Compare the last TREND_WINDOW days against everything before them."""
    n = len(daily_qty)
    avg_recent = daily_qty[-TREND_WINDOW:].sum() / min(TREND_WINDOW, n)
    avg_older = daily_qty[:-TREND_WINDOW].sum() / max(1, n - TREND_WINDOW)

    if avg_recent > avg_older * 1.2:
        return "increasing"
    elif avg_recent < avg_older * 0.8:
        return "decreasing"
    return "stable"


def calculate_sales_forecast(
    transactions: pd.DataFrame,
    item_id: str,
    days_to_forecast: int = 30,
) -> PredictiveAnalytics | None:
    """
    Forecast demand for one item using linear regression over daily sales.

    Steps:
    1. Genuine sales for the item, oldest first
    2. Sum quantity per calendar day (one point per day with a sale)
    3. Regress quantity on the day's sequence index (0, 1, 2, ...)
    4. Project one step ahead and scale to the forecast horizon

    Args:
        transactions: Transactions snapshot with a parsed timestamp column
        item_id: Item to forecast
        days_to_forecast: Horizon; the base projection counts as 30 days

    Returns:
        PredictiveAnalytics, or None when the item has fewer than 3 sales.
    """
    sales = sort_by_timestamp(genuine_sales(transactions, item_id))

    if len(sales) < MIN_SALES_FOR_FORECAST:
        logger.debug("Not enough sales to forecast %s (%d found)", item_id, len(sales))
        return None

    daily = sales.groupby(sales["timestamp"].dt.normalize(), sort=True)["quantity"].sum()
    if daily.empty:
        # Every qualifying sale had an unparseable timestamp
        logger.debug("No dated sales to forecast %s", item_id)
        return None

    y = daily.to_numpy(dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_x2 = (x * x).sum()

    denominator = n * sum_x2 - sum_x * sum_x
    # All sales on a single day: flat line through the mean
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n

    base_demand = max(0, int(round_half_up(slope * n + intercept)))

    residuals = y - (slope * x + intercept)
    variance = (residuals**2).sum() / n
    mean_y = sum_y / n
    if mean_y > 0:
        confidence = max(0.0, min(100.0, 100 - (variance / mean_y) * 10))
    else:
        confidence = 0.0

    return PredictiveAnalytics(
        item_id=str(item_id),
        item_name=str(sales.iloc[0]["item_name"]),
        predicted_demand=base_demand * days_to_forecast / 30,
        recommended_reorder_qty=math.ceil(base_demand * REORDER_BUFFER),
        confidence=int(round_half_up(confidence)),
        trend=_classify_trend(y),
    )


def forecast_all_items(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    days_to_forecast: int = 30,
) -> list[PredictiveAnalytics]:
    """Forecast every catalog item, skipping items without enough sales."""
    forecasts = []
    for item_id in items["id"]:
        forecast = calculate_sales_forecast(transactions, item_id, days_to_forecast)
        if forecast is not None:
            forecasts.append(forecast)
    return forecasts
