"""
Recovery Controller

Orchestrates backup, restore and auto-recovery of the live config:

    backup:        read config -> fingerprint -> dedupe -> write -> retention
    restore:       pre-restore safety backup -> atomic overwrite of config
    auto_recover:  restore the newest manual snapshot

Expected failures (missing config, unknown snapshot, no candidates) come back
as results. StorageWriteError propagates to the caller.
"""

import logging
from typing import Optional, List, Union

from ..config import GuardianConfig
from ..errors import (
    ConfigUnavailableError,
    NoRecoveryCandidatesError,
    SnapshotNotFoundError,
    StorageWriteError,
)
from ..snapshots.fingerprint import fingerprint
from ..snapshots.models import (
    SnapshotReason,
    SnapshotInfo,
    HealthReport,
    BackupResult,
    RestoreResult,
    RecoverResult,
)
from ..snapshots.retention import RetentionPolicy
from ..snapshots.store import SnapshotStore, atomic_write, validate_reason
from .health import HealthEvaluator, read_config

logger = logging.getLogger("health_guardian.recovery")


class RecoveryController:
    """
    Backup/restore/recover operations for one config file and snapshot dir.

    Usage:
        controller = RecoveryController(GuardianConfig(state_dir="~/.openclaw"))
        controller.backup("manual")
        if not controller.check().healthy:
            controller.auto_recover()

    Calls are not synchronized; the caller serializes them.
    """

    def __init__(
        self,
        config: GuardianConfig,
        store: Optional[SnapshotStore] = None,
        policy: Optional[RetentionPolicy] = None,
        evaluator: Optional[HealthEvaluator] = None,
    ):
        self.config = config
        self.store = store or SnapshotStore(config.snapshot_dir)
        self.policy = policy or RetentionPolicy(
            max_automatic=config.retention.max_automatic,
            protected_reasons=config.retention.protected_reasons,
        )
        self.evaluator = evaluator or HealthEvaluator(
            config.config_path,
            required_fields=config.required_fields,
        )

    @classmethod
    def from_config(cls, config: Optional[GuardianConfig] = None) -> "RecoveryController":
        """Build a controller, defaulting to OPENCLAW_STATE_DIR."""
        return cls(config or GuardianConfig.from_env())

    @property
    def config_path(self):
        return self.config.config_path

    # =========================================================================
    # Backup
    # =========================================================================

    def backup(self, reason: Union[str, SnapshotReason] = SnapshotReason.MANUAL) -> BackupResult:
        """
        Snapshot the live config unless identical content is already stored.

        Deduplication is global: a manual snapshot suppresses a later
        automatic one with the same bytes.

        Raises:
            ValueError: If reason is not a safe tag
            StorageWriteError: If the snapshot cannot be written
        """
        return self._backup(reason, deduplicate=True)

    def _backup(self, reason: Union[str, SnapshotReason], deduplicate: bool) -> BackupResult:
        reason = validate_reason(reason)
        self.store.ensure_ready()

        try:
            raw, _ = read_config(self.config_path)
        except ConfigUnavailableError as e:
            logger.info(f"Skipping {reason} backup: {e.message}")
            return BackupResult(success=False, reason=reason, skipped="config-unavailable")

        if deduplicate:
            duplicate = self._find_duplicate(fingerprint(raw))
            if duplicate:
                logger.info(f"Config unchanged, skipping backup (matches {duplicate})")
                return BackupResult(success=False, reason=reason, skipped="unchanged")

        filename = self.store.write_snapshot(reason, raw)
        logger.info(f"Backed up config: {filename}")

        expired = self.policy.apply(self.store)
        return BackupResult(success=True, filename=filename, reason=reason, expired=expired)

    def _find_duplicate(self, digest: str) -> Optional[str]:
        # Re-reads every snapshot; snapshot sets are small
        for snapshot in self.store.list_snapshots():
            try:
                content = self.store.read_snapshot(snapshot.filename)
            except SnapshotNotFoundError:
                continue
            if fingerprint(content) == digest:
                return snapshot.filename
        return None

    # =========================================================================
    # Restore
    # =========================================================================

    def restore(self, filename: str) -> RestoreResult:
        """
        Overwrite the live config with a snapshot, byte for byte.

        The current config is first saved as a pre-restore snapshot. That
        safety copy is always written (no deduplication) and a failure to
        write it does not block the restore.

        Raises:
            StorageWriteError: If the config itself cannot be replaced
        """
        try:
            content = self.store.read_snapshot(filename)
        except SnapshotNotFoundError as e:
            logger.warning(e.message)
            return RestoreResult(success=False, filename=filename, error=e.message)

        pre_restore = None
        try:
            safety = self._backup(SnapshotReason.PRE_RESTORE, deduplicate=False)
            pre_restore = safety.filename or None
        except StorageWriteError as e:
            logger.warning(f"Pre-restore backup failed, restoring anyway: {e.message}")

        atomic_write(self.config_path, content)
        logger.info(f"Restored: {filename}")
        return RestoreResult(success=True, filename=filename, pre_restore=pre_restore)

    # =========================================================================
    # Recovery
    # =========================================================================

    def latest_manual_snapshot(self) -> SnapshotInfo:
        """
        Newest snapshot taken on operator request.

        Raises:
            NoRecoveryCandidatesError: If there is none
        """
        for snapshot in self.store.list_snapshots():
            if snapshot.reason == SnapshotReason.MANUAL.value:
                return snapshot
        raise NoRecoveryCandidatesError(SnapshotReason.MANUAL.value)

    def auto_recover(self) -> RecoverResult:
        """Restore the newest manual snapshot. Other reasons are never used."""
        logger.info("Attempting auto-recovery...")

        try:
            candidate = self.latest_manual_snapshot()
        except NoRecoveryCandidatesError as e:
            logger.warning(e.message)
            return RecoverResult(success=False, error=e.message)

        result = self.restore(candidate.filename)
        return RecoverResult(
            success=result.success,
            filename=candidate.filename,
            pre_restore=result.pre_restore,
            error=result.error,
        )

    def check_and_recover(self) -> RecoverResult:
        """Auto-recover only if the config is currently unhealthy."""
        report = self.check()
        if report.healthy:
            return RecoverResult(success=True)
        logger.warning(f"Config unhealthy ({report.message}), recovering")
        return self.auto_recover()

    # =========================================================================
    # Queries / hooks
    # =========================================================================

    def check(self) -> HealthReport:
        return self.evaluator.evaluate()

    def list_snapshots(self) -> List[SnapshotInfo]:
        return self.store.list_snapshots()

    def on_startup(self) -> BackupResult:
        """Host startup hook: take a startup snapshot."""
        logger.info("Gateway starting, backing up config...")
        return self.backup(SnapshotReason.STARTUP)
