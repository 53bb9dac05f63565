"""
Report records returned by the analytics engine.

Pydantic models keep the structured reports well-typed and give callers a
direct path to JSON via ``model_dump``.
"""

from typing import Literal
from pydantic import BaseModel, Field


class PredictiveAnalytics(BaseModel):
    """Demand forecast for a single item."""

    item_id: str
    item_name: str
    predicted_demand: float = Field(
        description="Projected units sold over the forecast horizon"
    )
    recommended_reorder_qty: int = Field(
        description="Base demand plus a fixed 50% buffer, rounded up"
    )
    confidence: int = Field(ge=0, le=100, description="Heuristic fit score, 0-100")
    trend: Literal["increasing", "decreasing", "stable"]


class ReturnReasonBreakdown(BaseModel):
    """Returned stock grouped by return reason."""

    reason: str
    label: str = Field(description="Human-readable reason, e.g. 'Damaged Stock'")
    count: int = Field(description="Number of return records")
    quantity: float
    value: float
    percentage: float = Field(description="Share of total returned quantity")


class ItemReturnBreakdown(BaseModel):
    """Returned stock for a single item."""

    item_id: str
    item_name: str
    return_quantity: float
    return_value: float
    sales_quantity: float
    return_rate: float
    has_returns_without_sales: bool = Field(
        description="Returns recorded with no matching sales (data quality signal)"
    )


class ReturnAnalytics(BaseModel):
    """Return rates and breakdowns across the snapshot."""

    total_sales: float
    total_returns: float
    return_value: float
    damaged_returns: float
    supplier_returns: float
    return_rate: float
    damaged_return_rate: float
    supplier_return_rate: float
    by_reason: list[ReturnReasonBreakdown] = Field(default_factory=list)
    by_item: list[ItemReturnBreakdown] = Field(default_factory=list)
    has_returns_without_sales: bool = False


class Insight(BaseModel):
    """A single business insight for the dashboard."""

    type: Literal["success", "warning", "error"]
    message: str


class InventoryHealthReport(BaseModel):
    """Overall inventory health score and the insights behind it."""

    score: int = Field(ge=0, le=100, description="Weighted health score")
    stock_health: float = Field(description="Share of items in stock")
    low_stock_health: float = Field(description="Share of items above reorder level")
    return_health: float = Field(description="100 minus ten times the return rate, floored at 0")
    total_items: int
    out_of_stock_count: int
    low_stock_count: int
    profit_margin: float
    return_rate: float
    insights: list[Insight] = Field(default_factory=list)
