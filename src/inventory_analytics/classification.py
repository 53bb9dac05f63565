"""
ABC (Pareto) classification of items by revenue contribution.

A items: the head of the ranking that makes up the first 80% of revenue
B items: the next 15%
C items: the remaining 5%
"""

import logging
import pandas as pd

from .schema import catalog_lookup, empty_frame, genuine_sales, return_restocks

logger = logging.getLogger(__name__)

A_THRESHOLD = 80
B_THRESHOLD = 95

RECOMMENDATIONS = {
    "A": "High priority - maintain optimal stock levels, monitor closely",
    "B": "Medium priority - regular monitoring, moderate stock levels",
    "C": "Low priority - minimal stock, consider discontinuation if slow-moving",
}

ABC_COLUMNS = [
    "item_id",
    "item_name",
    "revenue",
    "revenue_contribution",
    "cumulative_revenue",
    "cumulative_percentage",
    "category",
    "recommendation",
]

ABC_WITH_RETURNS_COLUMNS = ABC_COLUMNS + ["gross_revenue", "return_value"]


def assign_category(cumulative_percentage: float) -> str:
    """Boundaries are inclusive: exactly 80% is still A."""
    if cumulative_percentage <= A_THRESHOLD:
        return "A"
    elif cumulative_percentage <= B_THRESHOLD:
        return "B"
    return "C"


def _revenue_by_item(items: pd.DataFrame, transactions: pd.DataFrame) -> pd.DataFrame:
    """Sum genuine sales revenue per item, in order of first sale."""
    sales = genuine_sales(transactions)
    revenue = (
        sales.groupby("item_id", sort=False)
        .agg(item_name=("item_name", "last"), revenue=("total_revenue", "sum"))
        .reset_index()
    )

    # Prefer the catalog name; sales keep the name at time of sale
    catalog_names = catalog_lookup(items, "name")
    revenue["item_name"] = revenue["item_id"].map(catalog_names).fillna(revenue["item_name"])
    return revenue


def _rank(revenue: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Rank by revenue, accumulate, and assign A/B/C."""
    ranked = revenue.sort_values("revenue", ascending=False, kind="mergesort").reset_index(
        drop=True
    )

    total_revenue = ranked["revenue"].sum()
    if len(ranked) == 0 or total_revenue <= 0:
        logger.debug("No revenue to classify")
        return empty_frame(columns)

    ranked["revenue_contribution"] = ranked["revenue"] / total_revenue * 100
    ranked["cumulative_revenue"] = ranked["revenue"].cumsum()
    ranked["cumulative_percentage"] = ranked["cumulative_revenue"] / total_revenue * 100
    ranked["category"] = ranked["cumulative_percentage"].apply(assign_category)
    ranked["recommendation"] = ranked["category"].map(RECOMMENDATIONS)

    return ranked[columns]


def perform_abc_analysis(items: pd.DataFrame, transactions: pd.DataFrame) -> pd.DataFrame:
    """
    Classify items by their share of genuine sales revenue.

    Items without sales do not appear in the ranking.

    Returns DataFrame sorted by revenue (descending) with:
    - revenue, revenue_contribution (% of total)
    - cumulative_revenue, cumulative_percentage
    - category (A/B/C) and a fixed recommendation
    """
    return _rank(_revenue_by_item(items, transactions), ABC_COLUMNS)


def perform_abc_analysis_with_returns(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    restocks: pd.DataFrame,
) -> pd.DataFrame:
    """
    ABC classification on revenue net of returns.

    The cost of damaged and supplier returns is subtracted from each item's
    revenue. Items whose net revenue is zero or negative are left out of
    the ranking entirely.
    """
    revenue = _revenue_by_item(items, transactions)

    returns = return_restocks(restocks)
    return_value = returns.groupby("item_id")["total_cost"].sum()

    revenue["gross_revenue"] = revenue["revenue"]
    revenue["return_value"] = revenue["item_id"].map(return_value).fillna(0.0)
    revenue["revenue"] = revenue["gross_revenue"] - revenue["return_value"]

    revenue = revenue[revenue["revenue"] > 0]

    return _rank(revenue, ABC_WITH_RETURNS_COLUMNS)
