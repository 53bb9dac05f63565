"""
Inventory velocity analysis functions.

Computes metrics for:
- Inventory turnover and movement status
- Statistical reorder points
- Dead stock
- Profit margin by category
"""

from datetime import datetime, timedelta
import logging
import math
import numpy as np
import pandas as pd

from .schema import (
    catalog_lookup,
    empty_frame,
    genuine_sales,
    require_columns,
    round_half_up,
    sort_by_timestamp,
)

logger = logging.getLogger(__name__)

# Z-score for a 95% one-tailed service level
Z_SCORE = 1.65
REORDER_WINDOW = 30

TURNOVER_COLUMNS = [
    "item_id",
    "item_name",
    "cogs_sold",
    "average_inventory_value",
    "turnover_ratio",
    "days_to_sell",
    "status",
]

REORDER_REPORT_COLUMNS = [
    "item_id",
    "item_name",
    "quantity",
    "reorder_level",
    "reorder_point",
    "needs_reorder",
]

MARGIN_COLUMNS = ["category", "margin", "revenue", "profit"]


def classify_movement(days_to_sell: float) -> str:
    """Movement status from days to sell through the average inventory."""
    if days_to_sell < 30:
        return "fast-moving"
    elif days_to_sell < 90:
        return "normal"
    elif days_to_sell < 180:
        return "slow-moving"
    return "dead-stock"


def calculate_inventory_turnover(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    period_days: int = 90,
    reference_date: datetime | None = None,
) -> pd.DataFrame:
    """
    Compute inventory turnover for every catalog item.

    Turnover Ratio = COGS of sales in the period / Average Inventory Value
    Days to Sell = period_days / Turnover Ratio

    Average inventory value is the item's running cost basis (total_cogs)
    when present and nonzero, otherwise quantity x cost price.

    Args:
        reference_date: End of the period. Defaults to now.

    Returns DataFrame with one row per item (catalog order), including:
    - turnover_ratio (2 dp)
    - days_to_sell (whole days, inf when nothing sold)
    - status (fast-moving/normal/slow-moving/dead-stock)
    """
    require_columns(items, ["id", "name", "quantity", "cost_price"], "items")

    if len(items) == 0:
        return empty_frame(TURNOVER_COLUMNS)

    if reference_date is None:
        reference_date = datetime.now()
    period_start = reference_date - timedelta(days=period_days)

    sales = genuine_sales(transactions)
    in_period = sales[
        (sales["timestamp"] >= period_start) & (sales["timestamp"] <= reference_date)
    ]
    cogs_by_item = in_period.groupby("item_id")["total_cost"].sum()

    turnover = pd.DataFrame(
        {
            "item_id": items["id"].to_numpy(),
            "item_name": items["name"].to_numpy(),
        }
    )
    turnover["cogs_sold"] = turnover["item_id"].map(cogs_by_item).fillna(0.0).astype(float)

    quantity_value = (items["quantity"] * items["cost_price"]).to_numpy(dtype=float)
    if "total_cogs" in items.columns:
        cost_basis = items["total_cogs"].fillna(0).to_numpy(dtype=float)
        turnover["average_inventory_value"] = np.where(
            cost_basis != 0, cost_basis, quantity_value
        )
    else:
        turnover["average_inventory_value"] = quantity_value

    value = turnover["average_inventory_value"]
    ratio = (turnover["cogs_sold"] / value.where(value > 0)).fillna(0.0)
    days = period_days / ratio.where(ratio > 0)
    days = days.fillna(np.inf)

    turnover["status"] = days.apply(classify_movement)
    turnover["turnover_ratio"] = ratio.apply(lambda r: round_half_up(r, 2))
    turnover["days_to_sell"] = days.apply(round_half_up)

    return turnover[TURNOVER_COLUMNS]


def calculate_reorder_point(
    transactions: pd.DataFrame,
    item_id: str,
    lead_time_days: int = 7,
    service_level: float = 0.95,
) -> int:
    """
    Calculate the inventory level at which an item should be reordered.

    Reorder Point = (Average Daily Sales x Lead Time) + Safety Stock
    Safety Stock = Z x StdDev(quantity per sale) x sqrt(Lead Time)

    Only the 30 most recent sale records are used, and the daily average
    always divides by 30 however many records exist. Z is fixed at 1.65;
    service_level is accepted but does not change it.
    """
    sales = sort_by_timestamp(genuine_sales(transactions, item_id)).tail(REORDER_WINDOW)

    if len(sales) == 0:
        return 0

    if service_level != 0.95:
        logger.debug(
            "service_level=%s ignored for %s, using z=%s", service_level, item_id, Z_SCORE
        )

    quantities = sales["quantity"].to_numpy(dtype=float)
    avg_daily_sales = quantities.sum() / REORDER_WINDOW
    std_dev = quantities.std()  # population (ddof=0)

    safety_stock = Z_SCORE * std_dev * math.sqrt(lead_time_days)
    reorder_point = avg_daily_sales * lead_time_days + safety_stock

    return max(0, math.ceil(reorder_point))


def reorder_point_report(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    lead_time_days: int = 7,
    service_level: float = 0.95,
) -> pd.DataFrame:
    """
    Compare each item's stock against its computed reorder point.

    needs_reorder is set when stock is at or below a positive reorder
    point. The configured reorder_level is carried along for comparison.
    """
    require_columns(items, ["id", "name", "quantity", "reorder_level"], "items")

    if len(items) == 0:
        return empty_frame(REORDER_REPORT_COLUMNS)

    report = pd.DataFrame(
        {
            "item_id": items["id"].to_numpy(),
            "item_name": items["name"].to_numpy(),
            "quantity": items["quantity"].to_numpy(),
            "reorder_level": items["reorder_level"].to_numpy(),
        }
    )
    report["reorder_point"] = [
        calculate_reorder_point(transactions, item_id, lead_time_days, service_level)
        for item_id in report["item_id"]
    ]
    report["needs_reorder"] = (report["reorder_point"] > 0) & (
        report["quantity"] <= report["reorder_point"]
    )

    return report[REORDER_REPORT_COLUMNS]


def identify_dead_stock(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    days_since_last_sale: int = 90,
    reference_date: datetime | None = None,
) -> pd.DataFrame:
    """
    Identify items with no genuine sale in the lookback window.

    Dead stock = never sold, or last sale before reference_date minus
    days_since_last_sale.

    Args:
        reference_date: Date to use as "today". Defaults to now.

    Returns the matching catalog rows (catalog order) with added
    last_sale_date (NaT when never sold) and days_since_last_sale.
    """
    require_columns(items, ["id"], "items")

    if reference_date is None:
        reference_date = datetime.now()
    cutoff = reference_date - timedelta(days=days_since_last_sale)

    sales = genuine_sales(transactions)
    last_sales = sales.groupby("item_id")["timestamp"].max()

    result = items.copy()
    # reindex keeps datetime64 even when nothing has sold
    result["last_sale_date"] = pd.to_datetime(last_sales.reindex(result["id"]).to_numpy())
    result["days_since_last_sale"] = (reference_date - result["last_sale_date"]).dt.days

    dead = result[result["last_sale_date"].isna() | (result["last_sale_date"] < cutoff)]
    return dead


def calculate_profit_margin_by_category(
    transactions: pd.DataFrame,
    items: pd.DataFrame,
) -> pd.DataFrame:
    """
    Aggregate genuine sales revenue and profit per item category.

    Sales whose item is no longer in the catalog are skipped.

    Returns DataFrame sorted by margin (descending) with:
    - category, margin (% of revenue), revenue, profit
    """
    require_columns(items, ["id", "category"], "items")

    sales = genuine_sales(transactions)
    categories = catalog_lookup(items, "category")
    sales = sales[sales["item_id"].isin(categories.index)].copy()

    if len(sales) == 0:
        return empty_frame(MARGIN_COLUMNS)

    sales["category"] = sales["item_id"].map(categories)

    by_category = (
        sales.groupby("category", sort=False, dropna=False)
        .agg(revenue=("total_revenue", "sum"), profit=("profit", "sum"))
        .reset_index()
    )

    by_category["margin"] = (
        by_category["profit"] / by_category["revenue"].where(by_category["revenue"] > 0) * 100
    ).fillna(0.0)

    by_category = by_category.sort_values("margin", ascending=False, kind="mergesort")
    return by_category[MARGIN_COLUMNS].reset_index(drop=True)
