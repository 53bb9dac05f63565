"""
Parsers for the formats the inventory data providers emit.

These parsers handle the two shapes records arrive in:
- Legacy spreadsheet timestamps ("2024-03-15 / 02:30 PM")
- ISO timestamps from the hosted store ("2026-02-02T18:32:00")
- camelCase field names that the engine addresses as snake_case columns
"""

import re
from datetime import datetime
import pandas as pd


class TimestampParser:
    """
    Timestamp parser for inventory transaction and restock records.

    Parsing happens once, at the data-provider boundary; the analytics
    functions only ever see parsed datetimes.
    To extend: Add new format patterns to TIMESTAMP_FORMATS.
    """

    # Formats seen in the inventory stores, legacy spreadsheet format first
    TIMESTAMP_FORMATS = [
        "%Y-%m-%d / %I:%M %p",   # Spreadsheet: 2024-03-15 / 02:30 PM
        "%Y-%m-%dT%H:%M:%S",     # Hosted store: 2026-02-02T18:32:00
        "%Y-%m-%dT%H:%M:%S.%f",  # Hosted store with fractions
        "%Y-%m-%d %H:%M:%S",     # Plain SQL export
        "%Y-%m-%d",              # Date only
    ]

    def __init__(self, custom_formats: list[str] | None = None):
        """
        Args:
            custom_formats: Additional formats to try (prepended to defaults)
        """
        self.formats = (custom_formats or []) + self.TIMESTAMP_FORMATS
        self._cache: dict[str, datetime | None] = {}

    def parse(self, value: str | None) -> datetime | None:
        """Parse a single timestamp string, trying each known format."""
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        if isinstance(value, datetime):
            return value

        value = str(value).strip()
        if not value:
            return None

        if value in self._cache:
            return self._cache[value]

        for fmt in self.formats:
            try:
                result = datetime.strptime(value, fmt)
                self._cache[value] = result
                return result
            except ValueError:
                continue

        self._cache[value] = None
        return None

    def parse_series(self, series: pd.Series) -> pd.Series:
        """Parse an entire Series; unparseable values become NaT."""
        return pd.to_datetime(series.apply(self.parse), errors="coerce")


class FieldNameNormalizer:
    """
    Converts provider field names to the engine's snake_case columns.

    Handles:
    - camelCase (itemId -> item_id)
    - Acronyms (totalCOGS -> total_cogs)
    - Spaces and dashes in spreadsheet headers ("Cost Price" -> cost_price)
    """

    # Names that camelCase splitting gets wrong
    DEFAULT_OVERRIDES = {
        "totalCOGS": "total_cogs",
    }

    _boundary = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

    def __init__(self, overrides: dict[str, str] | None = None):
        self.overrides = {**self.DEFAULT_OVERRIDES, **(overrides or {})}

    def normalize(self, name: str) -> str:
        """Normalize a single field name."""
        if name in self.overrides:
            return self.overrides[name]

        result = str(name).strip()
        result = self._boundary.sub("_", result)
        result = re.sub(r"[\s\-]+", "_", result)
        return result.lower()

    def normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of df with every column name normalized."""
        return df.rename(columns={c: self.normalize(c) for c in df.columns})
