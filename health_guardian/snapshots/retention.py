"""
Snapshot Retention Policy

Protected (manual) snapshots are kept forever; they represent explicit
operator intent. Every other reason (auto, startup, pre-restore, custom
tags) shares a single bucket capped to the newest `max_automatic`.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from .models import SnapshotInfo, SnapshotReason
from .store import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_AUTOMATIC = 10


class RetentionPolicy:
    """Decides which snapshots survive a cleanup pass."""

    def __init__(
        self,
        max_automatic: int = DEFAULT_MAX_AUTOMATIC,
        protected_reasons: Iterable[str] = (SnapshotReason.MANUAL.value,),
    ):
        if max_automatic < 0:
            raise ValueError(f"max_automatic must be >= 0, got {max_automatic}")
        self.max_automatic = max_automatic
        self.protected_reasons = frozenset(protected_reasons)

    def is_protected(self, snapshot: SnapshotInfo) -> bool:
        return snapshot.reason in self.protected_reasons

    def partition(
        self,
        snapshots: Sequence[SnapshotInfo],
    ) -> Tuple[List[SnapshotInfo], List[SnapshotInfo]]:
        """
        Split a snapshot set into (keep, expire).

        Input order does not matter; both lists come back most recent first.
        """
        ordered = sorted(snapshots, key=lambda s: (s.created_at, s.filename), reverse=True)

        keep, expire = [], []
        automatic_kept = 0
        for snapshot in ordered:
            if self.is_protected(snapshot):
                keep.append(snapshot)
            elif automatic_kept < self.max_automatic:
                keep.append(snapshot)
                automatic_kept += 1
            else:
                expire.append(snapshot)
        return keep, expire

    def apply(self, store: SnapshotStore) -> List[str]:
        """Delete expired snapshots from the store. Returns deleted filenames."""
        _, expire = self.partition(store.list_snapshots())

        deleted = []
        for snapshot in expire:
            if store.delete_snapshot(snapshot.filename):
                deleted.append(snapshot.filename)
                logger.info(f"Retention removed snapshot: {snapshot.filename}")
        return deleted
