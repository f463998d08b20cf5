"""
Snapshot Store

Filesystem-backed directory of immutable config snapshots.

Layout:
    <snapshot_dir>/snapshot_<reason>_<stamp>.json

The file name is the snapshot identity. The stamp is the UTC creation time
in ISO-8601 with ':' and '.' replaced by '-', so it is filesystem-safe and
sorts chronologically. Bodies are the raw config bytes, never rewritten.
"""

import contextlib
import logging
import os
import re
from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Callable, Optional, List, Tuple, Union

from ..errors import SnapshotNotFoundError, StorageWriteError
from .models import SnapshotInfo, SnapshotReason

logger = logging.getLogger("health_guardian.snapshots.store")

SNAPSHOT_PREFIX = "snapshot_"
SNAPSHOT_SUFFIX = ".json"

REASON_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
STAMP_PATTERN = r"(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})(?:-(?P<fraction>\d{1,6}))?Z"
FILENAME_PATTERN = re.compile(
    r"^snapshot_(?P<reason>[A-Za-z0-9][A-Za-z0-9_-]*)_" + STAMP_PATTERN + r"\.json$"
)


# =============================================================================
# Naming
# =============================================================================

def validate_reason(reason: Union[str, SnapshotReason]) -> str:
    """Return the reason tag, rejecting anything unsafe for a file name."""
    if isinstance(reason, SnapshotReason):
        reason = reason.value
    if not isinstance(reason, str) or not REASON_PATTERN.match(reason):
        raise ValueError(
            f"Invalid snapshot reason {reason!r}: use letters, digits, '-' or '_'"
        )
    return reason


def format_stamp(created_at: datetime) -> str:
    """2026-10-19T08:15:30.123456Z -> 2026-10-19T08-15-30-123456Z"""
    created_at = created_at.astimezone(timezone.utc)
    return f"{created_at:%Y-%m-%dT%H-%M-%S}-{created_at.microsecond:06d}Z"


def parse_stamp(stamp: str) -> datetime:
    """Inverse of format_stamp. Also accepts millisecond stamps."""
    match = re.fullmatch(STAMP_PATTERN, stamp)
    if not match:
        raise ValueError(f"Invalid snapshot stamp: {stamp}")
    created_at = datetime.strptime(match.group("stamp"), "%Y-%m-%dT%H-%M-%S")
    fraction = match.group("fraction") or "0"
    return created_at.replace(
        microsecond=int(fraction.ljust(6, "0")),
        tzinfo=timezone.utc,
    )


def build_filename(reason: Union[str, SnapshotReason], created_at: datetime) -> str:
    """Snapshot identity for a reason and creation time."""
    return f"{SNAPSHOT_PREFIX}{validate_reason(reason)}_{format_stamp(created_at)}{SNAPSHOT_SUFFIX}"


def parse_filename(filename: str) -> Optional[Tuple[str, datetime]]:
    """Return (reason, created_at), or None if not a snapshot file name."""
    match = FILENAME_PATTERN.match(filename)
    if not match:
        return None
    stamp = match.group("stamp")
    if match.group("fraction"):
        stamp += "-" + match.group("fraction")
    try:
        created_at = parse_stamp(stamp + "Z")
    except ValueError:
        # Matches the shape but is not a real date (e.g. month 13)
        return None
    return match.group("reason"), created_at


def is_snapshot_filename(filename: str) -> bool:
    return parse_filename(filename) is not None


# =============================================================================
# Atomic writes
# =============================================================================

def atomic_write(path: Path, data: bytes) -> None:
    """Write bytes to path via a temp file in the same directory + os.replace.

    Readers see either the old file or the complete new one. The temp name
    starts with '.' so it never matches the snapshot naming convention.

    Raises:
        StorageWriteError: If any step fails. The temp file is removed.
    """
    path = Path(path)
    temp_path = path.parent / f".{path.name}.{os.getpid()}.tmp"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise StorageWriteError(str(path), str(e)) from e


# =============================================================================
# Store
# =============================================================================

class SnapshotStore:
    """
    Directory of snapshot files.

    Creation times handed out by one store are strictly increasing, so two
    snapshots written in the same microsecond still get distinct,
    correctly ordered identities.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.directory = Path(directory)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_created: Optional[datetime] = None

    def ensure_ready(self) -> None:
        """Create the snapshot directory (and parents) if missing."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(str(self.directory), str(e)) from e

    def path_for(self, filename: str) -> Path:
        if not is_snapshot_filename(filename):
            raise SnapshotNotFoundError(filename)
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        if not is_snapshot_filename(filename):
            return False
        return (self.directory / filename).is_file()

    def _next_created_at(self) -> datetime:
        now = self._clock()
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return now

    def write_snapshot(self, reason: Union[str, SnapshotReason], content: bytes) -> str:
        """
        Persist content under a new identity.

        Returns:
            The new snapshot filename

        Raises:
            ValueError: If reason is not a safe tag
            StorageWriteError: If the write cannot complete
        """
        reason = validate_reason(reason)
        self.ensure_ready()

        filename = build_filename(reason, self._next_created_at())
        # Never overwrite, e.g. a file written by another store instance
        while (self.directory / filename).exists():
            filename = build_filename(reason, self._next_created_at())

        atomic_write(self.directory / filename, content)
        logger.debug(f"Wrote snapshot {filename} ({len(content)} bytes)")
        return filename

    def read_snapshot(self, filename: str) -> bytes:
        """Raw snapshot body. Raises SnapshotNotFoundError."""
        path = self.path_for(filename)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise SnapshotNotFoundError(filename)

    def list_snapshots(self) -> List[SnapshotInfo]:
        """All snapshots, most recent first. Foreign files are ignored."""
        if not self.directory.is_dir():
            return []

        snapshots = []
        for entry in self.directory.iterdir():
            parsed = parse_filename(entry.name)
            if parsed is None:
                continue
            try:
                if not entry.is_file():
                    continue
                size_bytes = entry.stat().st_size
            except FileNotFoundError:
                # Deleted between iterdir() and stat()
                continue
            reason, created_at = parsed
            snapshots.append(SnapshotInfo(
                filename=entry.name,
                reason=reason,
                created_at=created_at,
                size_bytes=size_bytes,
            ))

        snapshots.sort(key=lambda s: (s.created_at, s.filename), reverse=True)
        return snapshots

    def delete_snapshot(self, filename: str) -> bool:
        """Remove a snapshot. Returns False if it was already gone."""
        if not is_snapshot_filename(filename):
            return False
        try:
            (self.directory / filename).unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted snapshot {filename}")
        return True
