"""Storage — источник и приёмник снапшотов бирж (JSON файлы)."""

from .snapshot_store import (
    DEFAULT_EXCHANGES_DIR,
    ExchangeSnapshotStore,
    SnapshotStoreError,
    dumps_snapshot,
    loads_snapshot,
    snapshot_from_document,
    snapshot_to_document,
)

__all__ = [
    "DEFAULT_EXCHANGES_DIR",
    "ExchangeSnapshotStore",
    "SnapshotStoreError",
    "dumps_snapshot",
    "loads_snapshot",
    "snapshot_from_document",
    "snapshot_to_document",
]
