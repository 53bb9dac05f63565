"""
Snapshot loader for the inventory store exports.

THIS IS THE DATA-PROVIDER BOUNDARY:
- Field names arrive in the store's camelCase (itemId, totalCOGS, ...)
- Timestamps arrive as strings, legacy "2024-03-15 / 02:30 PM" or ISO
- transactionType is missing on rows written before it existed
- Numbers may arrive as strings from spreadsheet exports

Everything is normalized here, once, so the analytics engine only ever
sees snake_case columns, numeric dtypes and parsed timestamps.

Expected files in the data directory, JSON preferred over CSV:
- items.json / items.csv
- transactions.json / transactions.csv
- restocks.json / restocks.csv
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
import pandas as pd

from inventory_analytics.parsers import FieldNameNormalizer, TimestampParser
from inventory_analytics.quality import DataQualityChecker, DataQualityReport
from inventory_analytics.schema import (
    ITEM_COLUMNS,
    NUMERIC_COLUMNS,
    RESTOCK_COLUMNS,
    TRANSACTION_COLUMNS,
    InventorySnapshot,
    require_columns,
)

logger = logging.getLogger(__name__)


@dataclass
class LoadedSnapshot(InventorySnapshot):
    """Snapshot frames plus the quality report for each source."""

    quality_reports: dict[str, DataQualityReport] = field(default_factory=dict)

    def quality_summary(self) -> dict[str, dict]:
        """Per-source issue counts, ready to show beside the reports."""
        return {name: report.summary() for name, report in self.quality_reports.items()}


class RecordNormalizer:
    """
    Turns raw provider records into engine-ready snapshot frames.

    Handles:
    - Field name normalization (camelCase -> snake_case)
    - Numeric coercion (unparseable numbers become NaN)
    - Timestamp parsing (raw string kept in timestamp_raw)
    - Defaulting transaction_type to "sale" for legacy rows
    """

    REQUIRED_COLUMNS = {
        "items": ["id", "name", "quantity", "cost_price"],
        "transactions": ["id", "item_id", "quantity", "timestamp", "type"],
        "restocks": ["id", "item_id", "quantity", "timestamp", "reason"],
    }

    VALID_TYPES = {"sale", "restock"}
    VALID_TRANSACTION_TYPES = {"sale", "demo", "internal", "transfer"}

    def __init__(
        self,
        field_overrides: dict[str, str] | None = None,
        timestamp_formats: list[str] | None = None,
    ):
        self.field_normalizer = FieldNameNormalizer(field_overrides)
        self.timestamp_parser = TimestampParser(timestamp_formats)

    def prepare_items(self, df: pd.DataFrame) -> pd.DataFrame:
        """Normalize the item catalog."""
        df = self._prepare(df, "items", ITEM_COLUMNS)
        df["name"] = df["name"].fillna("")
        df["total_cogs"] = df["total_cogs"].fillna(0.0)
        df["reorder_level"] = df["reorder_level"].fillna(0)
        return df

    def prepare_transactions(self, df: pd.DataFrame) -> pd.DataFrame:
        """Normalize sale/usage transactions and parse their timestamps."""
        df = self._prepare(df, "transactions", TRANSACTION_COLUMNS)
        df["item_name"] = df["item_name"].fillna("")

        # Rows written before transactionType existed are sales
        df["transaction_type"] = (
            df["transaction_type"].astype(object).replace("", pd.NA).fillna("sale")
        )

        return self._parse_timestamps(df, "transactions")

    def prepare_restocks(self, df: pd.DataFrame) -> pd.DataFrame:
        """Normalize restock records and parse their timestamps."""
        df = self._prepare(df, "restocks", RESTOCK_COLUMNS)
        df["item_name"] = df["item_name"].fillna("")
        df["reason"] = df["reason"].fillna("").astype(str).str.strip()
        return self._parse_timestamps(df, "restocks")

    def check_quality(self, snapshot: InventorySnapshot) -> dict[str, DataQualityReport]:
        """Run quality checks on every frame of the snapshot."""
        known_ids = set(snapshot.items["id"].dropna())

        items_checker = (
            DataQualityChecker("Inventory Items", required_columns=["id", "name", "category"])
            .check_duplicates(["id"], severity="critical")
            .check_outliers("quantity", min_val=0, severity="critical")
            .check_outliers("cost_price", min_val=0)
            .check_outliers("selling_price", min_val=0)
        )

        transactions_checker = (
            DataQualityChecker("Transactions", required_columns=["item_id", "quantity"])
            .check_unparsed("timestamp_raw", "timestamp")
            .check_invalid_values("type", self.VALID_TYPES)
            .check_invalid_values("transaction_type", self.VALID_TRANSACTION_TYPES)
            .check_orphan_references("item_id", known_ids)
            .check_outliers("quantity", min_val=0)
        )

        restocks_checker = (
            DataQualityChecker("Restocks", required_columns=["item_id", "quantity"])
            .check_unparsed("timestamp_raw", "timestamp")
            .check_orphan_references("item_id", known_ids)
            .check_outliers("quantity", min_val=0)
        )

        return {
            "items": items_checker.run(snapshot.items),
            "transactions": transactions_checker.run(snapshot.transactions),
            "restocks": restocks_checker.run(snapshot.restocks),
        }

    def build(
        self,
        items: pd.DataFrame,
        transactions: pd.DataFrame,
        restocks: pd.DataFrame,
    ) -> LoadedSnapshot:
        """Prepare all three frames and attach quality reports."""
        snapshot = LoadedSnapshot(
            items=self.prepare_items(items),
            transactions=self.prepare_transactions(transactions),
            restocks=self.prepare_restocks(restocks),
        )
        snapshot.quality_reports = self.check_quality(snapshot)
        return snapshot

    def _prepare(self, df: pd.DataFrame, source: str, columns: list[str]) -> pd.DataFrame:
        if len(df.columns) == 0:
            # No records at all: an empty frame with the full schema
            df = pd.DataFrame(columns=columns)
        df = self.field_normalizer.normalize_columns(df)
        require_columns(df, self.REQUIRED_COLUMNS[source], source)

        for col in columns:
            if col not in df.columns:
                df[col] = pd.NA if col not in NUMERIC_COLUMNS[source] else 0.0

        for col in NUMERIC_COLUMNS[source]:
            df[col] = pd.to_numeric(df[col], errors="coerce")

        # Ids are opaque strings, even when the export wrote them as numbers
        for col in ("id", "item_id"):
            if col in df.columns:
                df[col] = df[col].map(lambda v: v if pd.isna(v) else str(v))

        return df

    def _parse_timestamps(self, df: pd.DataFrame, source: str) -> pd.DataFrame:
        df["timestamp_raw"] = df["timestamp"]
        df["timestamp"] = self.timestamp_parser.parse_series(df["timestamp_raw"])

        unparsed = int((df["timestamp_raw"].notna() & df["timestamp"].isna()).sum())
        if unparsed:
            logger.warning("%d %s timestamps could not be parsed", unparsed, source)
        return df


class SnapshotLoader:
    """
    Loads an inventory snapshot from a directory of store exports.

    Each source is read from <name>.json (a list of records, or an object
    holding the list under the source name) or, failing that, <name>.csv.
    """

    SOURCES = ("items", "transactions", "restocks")

    def __init__(
        self,
        data_dir: Path | str,
        field_overrides: dict[str, str] | None = None,
        timestamp_formats: list[str] | None = None,
    ):
        self.data_dir = Path(data_dir)
        self.normalizer = RecordNormalizer(field_overrides, timestamp_formats)

    def load_all(self) -> LoadedSnapshot:
        """Load, normalize and quality-check all sources."""
        frames = {name: self.read_source(name) for name in self.SOURCES}
        snapshot = self.normalizer.build(**frames)

        for name, summary in snapshot.quality_summary().items():
            if summary["critical"]:
                logger.warning(
                    "%s has %d critical data quality issue(s): %s",
                    name,
                    summary["critical"],
                    ", ".join(sorted(summary["affected_rows"])),
                )
            elif summary["warning"]:
                logger.info("%s has %d data quality warning(s)", name, summary["warning"])
        return snapshot

    def load_items(self) -> pd.DataFrame:
        return self.normalizer.prepare_items(self.read_source("items"))

    def load_transactions(self) -> pd.DataFrame:
        return self.normalizer.prepare_transactions(self.read_source("transactions"))

    def load_restocks(self) -> pd.DataFrame:
        return self.normalizer.prepare_restocks(self.read_source("restocks"))

    def read_source(self, name: str) -> pd.DataFrame:
        """
        Read one raw source without any normalization.

        Raises:
            FileNotFoundError: If neither <name>.json nor <name>.csv exists.
        """
        json_path = self.data_dir / f"{name}.json"
        csv_path = self.data_dir / f"{name}.csv"

        if json_path.exists():
            with open(json_path) as f:
                data = json.load(f)
            records = data.get(name, []) if isinstance(data, dict) else data
            df = pd.DataFrame(records)
            path = json_path
        elif csv_path.exists():
            # Read as text so ids like "007" survive; numbers are coerced later
            df = pd.read_csv(csv_path, dtype=str)
            path = csv_path
        else:
            raise FileNotFoundError(f"No {name}.json or {name}.csv in {self.data_dir}")

        logger.info("Loaded %d %s from %s", len(df), name, path)
        return df


def snapshot_from_records(
    items: list[dict],
    transactions: list[dict],
    restocks: list[dict],
) -> LoadedSnapshot:
    """Build a snapshot from in-memory records shaped like the store's rows."""
    return RecordNormalizer().build(
        items=pd.DataFrame(items),
        transactions=pd.DataFrame(transactions),
        restocks=pd.DataFrame(restocks),
    )
