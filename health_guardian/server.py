"""
Health Guardian Server

FastAPI application exposing snapshot and recovery operations over HTTP.
"""

import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from . import __version__
from .config import GuardianConfig, load_config
from .errors import StorageWriteError
from .recovery import RecoveryController
from .snapshots.models import SnapshotReason

logger = logging.getLogger("health_guardian.server")


# =============================================================================
# Pydantic Models
# =============================================================================

class BackupRequest(BaseModel):
    """Request to take a snapshot."""
    reason: str = Field(SnapshotReason.MANUAL.value, description="Snapshot reason tag")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(controller: Optional[RecoveryController] = None) -> FastAPI:
    """Create FastAPI application."""
    controller = controller or RecoveryController.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup backup, like the gateway start hook."""
        logger.info("Health Guardian starting...")
        try:
            controller.on_startup()
        except StorageWriteError as e:
            logger.error(f"Startup backup failed: {e.message}")
        yield
        logger.info("Health Guardian shutting down...")

    app = FastAPI(
        title="Health Guardian",
        description="Config snapshots, health checks and auto-recovery for OpenClaw",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.controller = controller

    # =========================================================================
    # Routes
    # =========================================================================

    @app.get("/")
    async def root():
        """Service info."""
        return {
            "service": "Health Guardian",
            "version": __version__,
            "config_path": str(controller.config_path),
            "snapshot_dir": str(controller.store.directory),
        }

    @app.get("/health")
    async def health():
        """Structural health of the live config."""
        return controller.check().model_dump()

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @app.get("/snapshots")
    async def list_snapshots():
        snapshots = controller.list_snapshots()
        return {"snapshots": [s.to_dict() for s in snapshots], "count": len(snapshots)}

    @app.post("/snapshots")
    async def create_snapshot(request: Optional[BackupRequest] = None):
        """Take a snapshot (skipped when the config is unchanged or missing)."""
        request = request or BackupRequest()
        try:
            result = controller.backup(request.reason)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except StorageWriteError as e:
            logger.error(f"Backup failed: {e.message}")
            raise HTTPException(status_code=500, detail=e.message)
        return {
            "success": result.success,
            "filename": result.filename,
            "skipped": result.skipped,
            "expired": result.expired,
        }

    @app.post("/snapshots/{filename}/restore")
    async def restore_snapshot(filename: str):
        try:
            result = controller.restore(filename)
        except StorageWriteError as e:
            logger.error(f"Restore failed: {e.message}")
            raise HTTPException(status_code=500, detail=e.message)
        if not result.success:
            raise HTTPException(status_code=404, detail=result.error)
        return {
            "success": True,
            "filename": result.filename,
            "pre_restore": result.pre_restore,
        }

    # -------------------------------------------------------------------------
    # Recovery
    # -------------------------------------------------------------------------

    @app.post("/recover")
    async def recover(only_if_unhealthy: bool = False):
        """Restore the newest manual snapshot."""
        try:
            if only_if_unhealthy:
                result = controller.check_and_recover()
            else:
                result = controller.auto_recover()
        except StorageWriteError as e:
            logger.error(f"Recovery failed: {e.message}")
            raise HTTPException(status_code=500, detail=e.message)
        if not result.success:
            raise HTTPException(status_code=409, detail=result.error)
        return {
            "success": True,
            "filename": result.filename,
            "pre_restore": result.pre_restore,
        }

    return app


# =============================================================================
# Main
# =============================================================================

def main(config_path: str = None, state_dir: str = None, host: str = None, port: int = None):
    """Run the Health Guardian server."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)

    if config_path:
        config = load_config(config_path, state_dir=state_dir)
    elif state_dir:
        config = GuardianConfig(state_dir=state_dir)
    else:
        config = GuardianConfig.from_env()

    app = create_app(RecoveryController.from_config(config))

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
