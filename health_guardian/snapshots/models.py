"""
Snapshot Models

Pydantic models for snapshot listings, health reports and operation results.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class SnapshotReason(str, Enum):
    """Built-in snapshot triggers. Any other safe tag is also accepted."""
    MANUAL = "manual"
    AUTO = "auto"
    STARTUP = "startup"
    PRE_RESTORE = "pre-restore"


class SnapshotInfo(BaseModel):
    """A stored snapshot as seen by list operations."""
    filename: str = Field(..., description="Snapshot identity (file name)")
    reason: str
    created_at: datetime
    size_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the host-facing JSON shape."""
        return {
            "filename": self.filename,
            "reason": self.reason,
            "createdAt": self.created_at.isoformat(),
            "sizeBytes": self.size_bytes,
        }


class HealthReport(BaseModel):
    """Structural health of the live config."""
    healthy: bool
    message: str


# =============================================================================
# Operation Results
# =============================================================================

class BackupResult(BaseModel):
    """Result of a backup.

    filename is empty when nothing was written; skipped then says why
    ("config-unavailable" or "unchanged").
    """
    success: bool
    filename: str = ""
    reason: Optional[str] = None
    skipped: Optional[str] = None
    expired: list[str] = Field(default_factory=list, description="Snapshots removed by retention")


class RestoreResult(BaseModel):
    """Result of restoring a snapshot over the live config."""
    success: bool
    filename: str
    pre_restore: Optional[str] = Field(None, description="Safety snapshot taken before restoring")
    error: Optional[str] = None


class RecoverResult(BaseModel):
    """Result of auto-recovery."""
    success: bool
    filename: Optional[str] = None
    pre_restore: Optional[str] = None
    error: Optional[str] = None
