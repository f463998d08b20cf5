"""
Error types for Health Guardian.

- GuardianError: Base exception
- ConfigUnavailableError: Live config missing or not valid JSON
- SnapshotNotFoundError: Requested snapshot does not exist
- StorageWriteError: Filesystem failure while writing a snapshot or config
- NoRecoveryCandidatesError: Auto-recovery found no manual snapshot

Expected failures (missing config, missing snapshot, no candidates) are
converted to results by the RecoveryController. StorageWriteError is the
only one that propagates past it.
"""

from typing import Any, Dict, Optional


class GuardianError(Exception):
    """Base exception for all Health Guardian errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "GUARDIAN_ERROR"
        self.details = details or {}


class ConfigUnavailableError(GuardianError):
    """Config file missing or not parseable."""

    def __init__(self, path: str, reason: Optional[str] = None):
        super().__init__(
            f"Config unavailable: {path}" + (f" ({reason})" if reason else ""),
            code="CONFIG_UNAVAILABLE",
            details={"path": path, "reason": reason},
        )
        self.path = path


class SnapshotNotFoundError(GuardianError):
    """No snapshot with the requested filename."""

    def __init__(self, filename: str):
        super().__init__(
            f"Snapshot not found: {filename}",
            code="SNAPSHOT_NOT_FOUND",
            details={"filename": filename},
        )
        self.filename = filename


class StorageWriteError(GuardianError):
    """A snapshot or config write could not complete (disk full, permissions)."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to write {path}: {reason}",
            code="STORAGE_WRITE_FAILED",
            details={"path": path, "reason": reason},
        )
        self.path = path


class NoRecoveryCandidatesError(GuardianError):
    """Auto-recovery has no trusted snapshot to restore."""

    def __init__(self, reason: str = "manual"):
        super().__init__(
            f"No {reason} snapshots to restore",
            code="NO_RECOVERY_CANDIDATES",
            details={"reason": reason},
        )
