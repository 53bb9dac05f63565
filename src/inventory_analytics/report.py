"""
Analytics report dispatcher.

Runs one named report (or all of them) against a snapshot and returns a
JSON-ready payload: DataFrames become lists of records, pydantic models
become dicts, timestamps become ISO strings and non-finite numbers become
None.
"""

from datetime import datetime
import logging
import math
from typing import Any
import numpy as np
import pandas as pd
from pydantic import BaseModel

from .analysis import (
    calculate_inventory_turnover,
    calculate_profit_margin_by_category,
    calculate_reorder_point,
    identify_dead_stock,
)
from .classification import perform_abc_analysis_with_returns
from .config import AnalyticsConfig
from .forecasting import calculate_sales_forecast, forecast_all_items
from .returns import calculate_net_sales, calculate_return_analytics, top_supplier_returns
from .schema import InventorySnapshot

logger = logging.getLogger(__name__)

REPORT_TYPES = (
    "forecast",
    "abc",
    "turnover",
    "deadstock",
    "profitmargin",
    "reorderpoint",
    "returns",
    "netsales",
    "all",
)


def run_analytics(
    snapshot: InventorySnapshot,
    report_type: str = "all",
    item_id: str | None = None,
    config: AnalyticsConfig | None = None,
    reference_date: datetime | None = None,
) -> Any:
    """
    Compute a report by name.

    Args:
        snapshot: Items, transactions and restocks with parsed timestamps
        report_type: One of REPORT_TYPES
        item_id: Target item for "forecast" (optional) and "reorderpoint"
        config: Windows and thresholds; defaults to AnalyticsConfig()
        reference_date: "Now" for windowed reports. Defaults to now.

    Raises:
        ValueError: If report_type is not a known report.
    """
    if report_type not in REPORT_TYPES:
        raise ValueError(
            f"Unknown report type {report_type!r}; expected one of {', '.join(REPORT_TYPES)}"
        )

    config = config or AnalyticsConfig()
    items, transactions, restocks = snapshot.items, snapshot.transactions, snapshot.restocks
    logger.debug("Running %s report (item_id=%s)", report_type, item_id)

    if report_type == "forecast":
        if item_id:
            result = calculate_sales_forecast(transactions, item_id, config.forecast_days)
        else:
            result = forecast_all_items(items, transactions, config.forecast_days)

    elif report_type == "abc":
        result = perform_abc_analysis_with_returns(items, transactions, restocks)

    elif report_type == "turnover":
        result = calculate_inventory_turnover(
            items, transactions, config.turnover_period_days, reference_date
        )

    elif report_type == "deadstock":
        result = identify_dead_stock(items, transactions, config.dead_stock_days, reference_date)

    elif report_type == "profitmargin":
        result = calculate_profit_margin_by_category(transactions, items)

    elif report_type == "reorderpoint":
        result = {}
        if item_id:
            result = {
                "reorder_point": calculate_reorder_point(
                    transactions, item_id, config.lead_time_days, config.service_level
                )
            }

    elif report_type == "returns":
        result = calculate_return_analytics(restocks, transactions, items)

    elif report_type == "netsales":
        result = calculate_net_sales(transactions, restocks)

    else:
        result = {
            "abc": perform_abc_analysis_with_returns(items, transactions, restocks),
            "turnover": calculate_inventory_turnover(
                items, transactions, config.turnover_period_days, reference_date
            ),
            "dead_stock": identify_dead_stock(
                items, transactions, config.dead_stock_days, reference_date
            ),
            "profit_margin": calculate_profit_margin_by_category(transactions, items),
            "returns": calculate_return_analytics(restocks, transactions, items),
            "net_sales": calculate_net_sales(transactions, restocks),
            "top_supplier_returns": top_supplier_returns(restocks, config.top_returns_limit),
        }

    return to_payload(result)


def to_payload(value: Any) -> Any:
    """Convert report results into plain JSON-serializable structures."""
    if isinstance(value, BaseModel):
        return to_payload(value.model_dump())
    if isinstance(value, pd.DataFrame):
        return [
            {str(k): _json_scalar(v) for k, v in record.items()}
            for record in value.to_dict(orient="records")
        ]
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    return _json_scalar(value)


def _json_scalar(value: Any) -> Any:
    if value is None or value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.isoformat()
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return float(value) if math.isfinite(value) else None
    return value
