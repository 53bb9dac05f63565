"""
Return-rate analytics.

Returns are restocks whose reason is "damaged-return" or "supplier-return";
every other restock reason is ordinary replenishment and is ignored here.
All rates use the genuine sales quantity as the denominator. Items with
returns but no sales are flagged, not corrected.
"""

import logging
import pandas as pd

from .models import ItemReturnBreakdown, ReturnAnalytics, ReturnReasonBreakdown
from .schema import (
    DAMAGED_RETURN,
    RETURN_REASON_LABELS,
    RETURN_REASONS,
    SUPPLIER_RETURN,
    catalog_lookup,
    empty_frame,
    genuine_sales,
    return_restocks,
)

logger = logging.getLogger(__name__)

NET_SALES_COLUMNS = ["item_id", "item_name", "gross_sales", "returns", "net_sales"]
SUPPLIER_RETURN_COLUMNS = ["item_name", "quantity", "value"]


def _percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def calculate_return_analytics(
    restocks: pd.DataFrame,
    transactions: pd.DataFrame,
    items: pd.DataFrame,
) -> ReturnAnalytics:
    """
    Compute return totals, rates and breakdowns for the snapshot.

    Rates:
    - return_rate = returned quantity / sold quantity x 100
    - damaged_return_rate, supplier_return_rate over the same denominator

    Breakdowns:
    - by_reason: count, quantity, value and share of all returns
    - by_item: per-item quantities, item return rate and a flag for
      items that have returns but no sales
    """
    returns = return_restocks(restocks)
    sales = genuine_sales(transactions)

    total_sales = float(sales["quantity"].sum())
    total_returns = float(returns["quantity"].sum())
    return_value = float(returns["total_cost"].sum())

    damaged = returns[returns["reason"] == DAMAGED_RETURN]
    supplier = returns[returns["reason"] == SUPPLIER_RETURN]
    damaged_returns = float(damaged["quantity"].sum())
    supplier_returns = float(supplier["quantity"].sum())

    by_reason = []
    for reason in RETURN_REASONS:
        subset = returns[returns["reason"] == reason]
        if len(subset) == 0:
            continue
        quantity = float(subset["quantity"].sum())
        by_reason.append(
            ReturnReasonBreakdown(
                reason=reason,
                label=RETURN_REASON_LABELS[reason],
                count=len(subset),
                quantity=quantity,
                value=float(subset["total_cost"].sum()),
                percentage=_percentage(quantity, total_returns),
            )
        )

    by_item = _item_breakdown(returns, sales, items)
    has_returns_without_sales = any(i.has_returns_without_sales for i in by_item)

    if has_returns_without_sales:
        logger.debug(
            "%d item(s) have returns without sales",
            sum(i.has_returns_without_sales for i in by_item),
        )

    return ReturnAnalytics(
        total_sales=total_sales,
        total_returns=total_returns,
        return_value=return_value,
        damaged_returns=damaged_returns,
        supplier_returns=supplier_returns,
        return_rate=_percentage(total_returns, total_sales),
        damaged_return_rate=_percentage(damaged_returns, total_sales),
        supplier_return_rate=_percentage(supplier_returns, total_sales),
        by_reason=by_reason,
        by_item=by_item,
        has_returns_without_sales=has_returns_without_sales,
    )


def _item_breakdown(
    returns: pd.DataFrame, sales: pd.DataFrame, items: pd.DataFrame
) -> list[ItemReturnBreakdown]:
    """Per-item return quantities, sorted by returned quantity (descending)."""
    if len(returns) == 0:
        return []

    per_item = (
        returns.groupby("item_id", sort=False)
        .agg(
            item_name=("item_name", "last"),
            return_quantity=("quantity", "sum"),
            return_value=("total_cost", "sum"),
        )
        .reset_index()
    )
    per_item["item_name"] = (
        per_item["item_id"].map(catalog_lookup(items, "name")).fillna(per_item["item_name"])
    )
    per_item["sales_quantity"] = (
        per_item["item_id"].map(sales.groupby("item_id")["quantity"].sum()).fillna(0.0)
    )
    per_item = per_item.sort_values("return_quantity", ascending=False, kind="mergesort")

    breakdown = []
    for row in per_item.itertuples(index=False):
        breakdown.append(
            ItemReturnBreakdown(
                item_id=str(row.item_id),
                item_name=str(row.item_name),
                return_quantity=float(row.return_quantity),
                return_value=float(row.return_value),
                sales_quantity=float(row.sales_quantity),
                return_rate=_percentage(row.return_quantity, row.sales_quantity),
                has_returns_without_sales=bool(row.sales_quantity == 0),
            )
        )
    return breakdown


def calculate_net_sales(transactions: pd.DataFrame, restocks: pd.DataFrame) -> pd.DataFrame:
    """
    Gross quantity sold minus quantity returned, per item.

    Items that only appear in returns show up with zero gross sales and a
    negative net figure.

    Returns DataFrame sorted by net_sales (descending).
    """
    sales = genuine_sales(transactions)
    returns = return_restocks(restocks)

    if len(sales) == 0 and len(returns) == 0:
        return empty_frame(NET_SALES_COLUMNS)

    gross = sales.groupby("item_id", sort=False).agg(
        item_name=("item_name", "last"), gross_sales=("quantity", "sum")
    )
    returned = returns.groupby("item_id", sort=False).agg(
        return_name=("item_name", "last"), returns=("quantity", "sum")
    )

    net = gross.join(returned, how="outer")
    net.index.name = "item_id"
    net["item_name"] = net["item_name"].fillna(net["return_name"])
    net["gross_sales"] = net["gross_sales"].fillna(0)
    net["returns"] = net["returns"].fillna(0)
    net["net_sales"] = net["gross_sales"] - net["returns"]

    net = net.reset_index().sort_values("net_sales", ascending=False, kind="mergesort")
    return net[NET_SALES_COLUMNS].reset_index(drop=True)


def top_supplier_returns(restocks: pd.DataFrame, limit: int = 5) -> pd.DataFrame:
    """Items most returned to suppliers, ranked by value."""
    returns = return_restocks(restocks)
    supplier = returns[returns["reason"] == SUPPLIER_RETURN]

    if len(supplier) == 0:
        return empty_frame(SUPPLIER_RETURN_COLUMNS)

    top = (
        supplier.groupby("item_name", sort=False)
        .agg(quantity=("quantity", "sum"), value=("total_cost", "sum"))
        .reset_index()
        .sort_values("value", ascending=False, kind="mergesort")
        .head(limit)
    )
    return top[SUPPLIER_RETURN_COLUMNS].reset_index(drop=True)
