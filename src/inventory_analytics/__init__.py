# Stateless analytics over inventory snapshots
# Every function takes already-loaded DataFrames and returns a derived report

from .parsers import TimestampParser, FieldNameNormalizer
from .schema import (
    InventorySnapshot,
    SnapshotSchemaError,
    genuine_sales,
    return_restocks,
)
from .config import AnalyticsConfig
from .models import (
    PredictiveAnalytics,
    ReturnAnalytics,
    ReturnReasonBreakdown,
    ItemReturnBreakdown,
    Insight,
    InventoryHealthReport,
)
from .forecasting import calculate_sales_forecast, forecast_all_items
from .classification import perform_abc_analysis, perform_abc_analysis_with_returns
from .analysis import (
    calculate_inventory_turnover,
    calculate_reorder_point,
    reorder_point_report,
    identify_dead_stock,
    calculate_profit_margin_by_category,
)
from .returns import calculate_return_analytics, calculate_net_sales, top_supplier_returns
from .insights import calculate_inventory_health, generate_insights
from .quality import DataQualityIssue, DataQualityReport, DataQualityChecker
from .report import REPORT_TYPES, run_analytics, to_payload

__all__ = [
    "TimestampParser",
    "FieldNameNormalizer",
    "InventorySnapshot",
    "SnapshotSchemaError",
    "genuine_sales",
    "return_restocks",
    "AnalyticsConfig",
    "PredictiveAnalytics",
    "ReturnAnalytics",
    "ReturnReasonBreakdown",
    "ItemReturnBreakdown",
    "Insight",
    "InventoryHealthReport",
    "calculate_sales_forecast",
    "forecast_all_items",
    "perform_abc_analysis",
    "perform_abc_analysis_with_returns",
    "calculate_inventory_turnover",
    "calculate_reorder_point",
    "reorder_point_report",
    "identify_dead_stock",
    "calculate_profit_margin_by_category",
    "calculate_return_analytics",
    "calculate_net_sales",
    "top_supplier_returns",
    "calculate_inventory_health",
    "generate_insights",
    "DataQualityIssue",
    "DataQualityReport",
    "DataQualityChecker",
    "REPORT_TYPES",
    "run_analytics",
    "to_payload",
]
