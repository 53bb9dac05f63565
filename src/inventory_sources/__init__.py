# Data-provider adapters for the analytics engine
# Each loader turns a store's raw export into a parsed InventorySnapshot

from .snapshot_loader import (
    LoadedSnapshot,
    RecordNormalizer,
    SnapshotLoader,
    snapshot_from_records,
)

__all__ = ["LoadedSnapshot", "RecordNormalizer", "SnapshotLoader", "snapshot_from_records"]
