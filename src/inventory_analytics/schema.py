"""
Column contracts for inventory snapshots and the filters every report shares.

A snapshot is three DataFrames: items, transactions and restocks. Providers
are expected to hand over parsed ``timestamp`` columns (see
``inventory_sources.SnapshotLoader``); the engine never parses strings.
"""

import math
from dataclasses import dataclass
import pandas as pd

ITEM_COLUMNS = [
    "id",
    "name",
    "category",
    "quantity",
    "cost_price",
    "selling_price",
    "reorder_level",
    "total_cogs",
]

TRANSACTION_COLUMNS = [
    "id",
    "item_id",
    "item_name",
    "quantity",
    "cost_price",
    "selling_price",
    "total_cost",
    "total_revenue",
    "profit",
    "timestamp",
    "type",
    "transaction_type",
]

RESTOCK_COLUMNS = [
    "id",
    "item_id",
    "item_name",
    "quantity",
    "cost_price",
    "total_cost",
    "timestamp",
    "reason",
]

NUMERIC_COLUMNS = {
    "items": ["quantity", "cost_price", "selling_price", "reorder_level", "total_cogs"],
    "transactions": [
        "quantity",
        "cost_price",
        "selling_price",
        "total_cost",
        "total_revenue",
        "profit",
    ],
    "restocks": ["quantity", "cost_price", "total_cost"],
}

# Restock reasons that represent stock leaving through a return
DAMAGED_RETURN = "damaged-return"
SUPPLIER_RETURN = "supplier-return"
RETURN_REASONS = (DAMAGED_RETURN, SUPPLIER_RETURN)

RETURN_REASON_LABELS = {
    DAMAGED_RETURN: "Damaged Stock",
    SUPPLIER_RETURN: "Returns to Supplier",
}


class SnapshotSchemaError(ValueError):
    """A snapshot frame is missing columns the engine depends on."""

    def __init__(self, source: str, missing: list[str]):
        self.source = source
        self.missing = missing
        super().__init__(f"{source} is missing required columns: {', '.join(missing)}")


def require_columns(df: pd.DataFrame, columns: list[str], source: str) -> None:
    """Raise SnapshotSchemaError if any of columns is absent from df."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SnapshotSchemaError(source, missing)


def genuine_sales(transactions: pd.DataFrame, item_id: str | None = None) -> pd.DataFrame:
    """
    Filter transactions to revenue-generating sales.

    A genuine sale has type "sale" and transaction_type "sale"; demo,
    internal and transfer movements are excluded. Optionally restricts the
    result to a single item.
    """
    require_columns(transactions, ["item_id", "type", "transaction_type"], "transactions")

    mask = (transactions["type"] == "sale") & (transactions["transaction_type"] == "sale")
    if item_id is not None:
        mask &= transactions["item_id"] == item_id
    return transactions[mask].copy()


def return_restocks(restocks: pd.DataFrame) -> pd.DataFrame:
    """Filter restocks to damaged and supplier returns."""
    require_columns(restocks, ["item_id", "reason"], "restocks")
    return restocks[restocks["reason"].isin(RETURN_REASONS)].copy()


def sort_by_timestamp(df: pd.DataFrame, ascending: bool = True) -> pd.DataFrame:
    """Stable sort on the parsed timestamp; unparsed (NaT) rows sort as oldest."""
    return df.sort_values(
        "timestamp",
        ascending=ascending,
        kind="mergesort",
        na_position="first" if ascending else "last",
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values (2.5 -> 3, not 2)."""
    if math.isinf(value) or math.isnan(value):
        return value
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def empty_frame(columns: list[str]) -> pd.DataFrame:
    """An empty report with the given columns."""
    return pd.DataFrame(columns=columns)


def catalog_lookup(items: pd.DataFrame, column: str) -> pd.Series:
    """Series mapping item id to one catalog column (first row wins on duplicate ids)."""
    if len(items) == 0:
        return pd.Series(dtype=object)
    return items.drop_duplicates("id").set_index("id")[column]


@dataclass
class InventorySnapshot:
    """The three frames every report is computed from."""

    items: pd.DataFrame
    transactions: pd.DataFrame
    restocks: pd.DataFrame
