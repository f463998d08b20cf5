"""
Config Snapshots

Point-in-time copies of the OpenClaw config file.

Features:
- Content fingerprints for deduplication (SHA256)
- Atomic writes (temp file + rename)
- Retention: manual snapshots kept, automatic ones capped
"""

from .fingerprint import fingerprint
from .models import (
    SnapshotReason,
    SnapshotInfo,
    HealthReport,
    BackupResult,
    RestoreResult,
    RecoverResult,
)
from .store import (
    SnapshotStore,
    atomic_write,
    build_filename,
    parse_filename,
    is_snapshot_filename,
)
from .retention import RetentionPolicy

__all__ = [
    "fingerprint",
    "SnapshotReason",
    "SnapshotInfo",
    "HealthReport",
    "BackupResult",
    "RestoreResult",
    "RecoverResult",
    "SnapshotStore",
    "atomic_write",
    "build_filename",
    "parse_filename",
    "is_snapshot_filename",
    "RetentionPolicy",
]
