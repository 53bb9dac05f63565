"""
Inventory health scoring and rule-based business insights.

The health score blends three percentages:
- 40% stock health (items not out of stock)
- 30% return health (100 minus ten times the return rate)
- 30% low-stock health (items above their reorder level)

Insights are short messages for the dashboard; every number in them is
computed here, never estimated.
"""

import pandas as pd

from .models import Insight, InventoryHealthReport
from .returns import calculate_return_analytics
from .schema import genuine_sales, require_columns, round_half_up

STOCK_WEIGHT = 0.4
RETURN_WEIGHT = 0.3
LOW_STOCK_WEIGHT = 0.3

HEALTHY_MARGIN = 30
LOW_MARGIN = 15
HIGH_RETURN_RATE = 10


def calculate_inventory_health(
    items: pd.DataFrame,
    transactions: pd.DataFrame,
    restocks: pd.DataFrame,
    currency: str = "₱",
) -> InventoryHealthReport:
    """
    Score overall inventory health (0-100) and collect insights.

    An item is out of stock at quantity 0 and low on stock at or below its
    reorder level (out-of-stock items count as low too).
    """
    require_columns(items, ["quantity", "reorder_level"], "items")

    total_items = len(items)
    out_of_stock = int((items["quantity"] == 0).sum())
    low_stock = int((items["quantity"] <= items["reorder_level"]).sum())

    sales = genuine_sales(transactions)
    revenue = float(sales["total_revenue"].sum())
    profit = float(sales["profit"].sum())
    profit_margin = profit / revenue * 100 if revenue > 0 else 0.0

    return_rate = calculate_return_analytics(restocks, transactions, items).return_rate

    stock_health = (total_items - out_of_stock) / total_items * 100 if total_items else 100.0
    low_stock_health = (total_items - low_stock) / total_items * 100 if total_items else 100.0
    return_health = 100 - min(return_rate * 10, 100)

    score = round_half_up(
        stock_health * STOCK_WEIGHT
        + return_health * RETURN_WEIGHT
        + low_stock_health * LOW_STOCK_WEIGHT
    )

    insights = generate_insights(
        sales,
        low_stock_count=low_stock,
        out_of_stock_count=out_of_stock,
        profit_margin=profit_margin,
        return_rate=return_rate,
        currency=currency,
    )

    return InventoryHealthReport(
        score=int(score),
        stock_health=stock_health,
        low_stock_health=low_stock_health,
        return_health=return_health,
        total_items=total_items,
        out_of_stock_count=out_of_stock,
        low_stock_count=low_stock,
        profit_margin=profit_margin,
        return_rate=return_rate,
        insights=insights,
    )


def generate_insights(
    sales: pd.DataFrame,
    low_stock_count: int,
    out_of_stock_count: int,
    profit_margin: float,
    return_rate: float,
    currency: str = "₱",
) -> list[Insight]:
    """Build dashboard insights from pre-computed figures and genuine sales."""
    insights = []

    if len(sales) > 0:
        # Ranked by units sold; ties go to the product sold first
        by_product = sales.groupby("item_name", sort=False).agg(
            quantity=("quantity", "sum"), revenue=("total_revenue", "sum")
        )
        best_seller = by_product["quantity"].idxmax()
        insights.append(
            Insight(
                type="success",
                message=(
                    f"Best seller: {best_seller} with "
                    f"{currency}{by_product.loc[best_seller, 'revenue']:,.2f} revenue"
                ),
            )
        )

    if low_stock_count > 0:
        insights.append(
            Insight(type="warning", message=f"{low_stock_count} items need restocking soon")
        )

    if out_of_stock_count > 0:
        insights.append(
            Insight(
                type="error",
                message=(
                    f"{out_of_stock_count} items are out of stock - "
                    "immediate action required"
                ),
            )
        )

    # Margin is meaningless without revenue
    if len(sales) > 0 and sales["total_revenue"].sum() > 0:
        if profit_margin >= HEALTHY_MARGIN:
            insights.append(
                Insight(
                    type="success",
                    message=f"Excellent profit margin of {profit_margin:.1f}% - keep it up!",
                )
            )
        elif profit_margin < LOW_MARGIN:
            insights.append(
                Insight(
                    type="warning",
                    message=(
                        f"Profit margin is {profit_margin:.1f}% - consider reviewing pricing"
                    ),
                )
            )

    if return_rate > HIGH_RETURN_RATE:
        insights.append(
            Insight(
                type="error",
                message=f"High return rate of {return_rate:.1f}% - check product quality",
            )
        )

    return insights
