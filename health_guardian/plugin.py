"""
Health Guardian Plugin

Host-facing tool bundle for the OpenClaw gateway. Exposes the recovery
operations as named tools (JSON-schema input + async handler) plus a
gateway startup hook.

Usage:
    plugin = register()
    await plugin.call("healthGuardianBackup")
    plugin.on_gateway_start()
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable, Awaitable, Type

from pydantic import BaseModel, ConfigDict, Field

from .errors import StorageWriteError
from .recovery import RecoveryController
from .snapshots.models import SnapshotReason

logger = logging.getLogger("health_guardian.plugin")

PLUGIN_NAME = "health-guardian"

ToolHandler = Callable[[Optional[Dict[str, Any]]], Awaitable[Dict[str, Any]]]


# =============================================================================
# Tool argument schemas
# =============================================================================

class NoArgs(BaseModel):
    """Tools that take no input."""
    model_config = ConfigDict(extra="ignore")


class RestoreArgs(BaseModel):
    """Arguments for healthGuardianRestore."""
    filename: str = Field(..., description="Snapshot filename to restore")


@dataclass
class GuardianTool:
    """A tool registered with the host."""
    name: str
    description: str
    args_model: Type[BaseModel]
    handler: ToolHandler

    @property
    def input_schema(self) -> Dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.pop("description", None)
        return schema

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class GuardianPlugin:
    """Tools + lifecycle hook handed to the host."""
    controller: RecoveryController
    name: str = PLUGIN_NAME
    tools: Dict[str, GuardianTool] = field(default_factory=dict)

    def add_tool(self, tool: GuardianTool) -> None:
        self.tools[tool.name] = tool

    async def call(self, tool_name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Invoke a tool by name."""
        tool = self.tools.get(tool_name)
        if tool is None:
            raise KeyError(f"Unknown tool: {tool_name}")
        return await tool.handler(args)

    def on_gateway_start(self) -> None:
        """Runs once at gateway startup, before control returns to the host."""
        try:
            self.controller.on_startup()
        except StorageWriteError as e:
            logger.error(f"Startup backup failed: {e.message}")

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "tools": [t.to_dict() for t in self.tools.values()],
        }


# =============================================================================
# Registration
# =============================================================================

def register(controller: Optional[RecoveryController] = None) -> GuardianPlugin:
    """Build the plugin bundle (controller defaults to OPENCLAW_STATE_DIR)."""
    controller = controller or RecoveryController.from_config()
    plugin = GuardianPlugin(controller=controller)

    def backup_handler(reason: SnapshotReason) -> ToolHandler:
        async def handler(args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
            NoArgs.model_validate(args or {})
            try:
                result = controller.backup(reason)
            except StorageWriteError as e:
                logger.error(f"{reason.value} backup failed: {e.message}")
                return {"success": False, "filename": "", "error": e.message}
            return {"success": result.success, "filename": result.filename}
        return handler

    async def list_handler(args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        NoArgs.model_validate(args or {})
        snapshots = controller.list_snapshots()
        return {"snapshots": [s.to_dict() for s in snapshots], "count": len(snapshots)}

    async def restore_handler(args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        request = RestoreArgs.model_validate(args or {})
        try:
            result = controller.restore(request.filename)
        except StorageWriteError as e:
            logger.error(f"Restore of {request.filename} failed: {e.message}")
            return {"success": False, "filename": request.filename, "error": e.message}
        return {"success": result.success, "filename": result.filename}

    async def check_handler(args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        NoArgs.model_validate(args or {})
        return controller.check().model_dump()

    async def recover_handler(args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        NoArgs.model_validate(args or {})
        try:
            result = controller.auto_recover()
        except StorageWriteError as e:
            logger.error(f"Auto-recovery failed: {e.message}")
            return {"success": False, "error": e.message}
        return {"success": result.success}

    plugin.add_tool(GuardianTool(
        name="healthGuardianBackup",
        description="Backup current OpenClaw config (manual)",
        args_model=NoArgs,
        handler=backup_handler(SnapshotReason.MANUAL),
    ))
    plugin.add_tool(GuardianTool(
        name="healthGuardianAutoBackup",
        description="Auto backup before config changes",
        args_model=NoArgs,
        handler=backup_handler(SnapshotReason.AUTO),
    ))
    plugin.add_tool(GuardianTool(
        name="healthGuardianList",
        description="List all config snapshots",
        args_model=NoArgs,
        handler=list_handler,
    ))
    plugin.add_tool(GuardianTool(
        name="healthGuardianRestore",
        description="Restore config from a snapshot",
        args_model=RestoreArgs,
        handler=restore_handler,
    ))
    plugin.add_tool(GuardianTool(
        name="healthGuardianCheck",
        description="Check OpenClaw config health",
        args_model=NoArgs,
        handler=check_handler,
    ))
    plugin.add_tool(GuardianTool(
        name="healthGuardianAutoRecover",
        description="Auto-recover from last good manual snapshot",
        args_model=NoArgs,
        handler=recover_handler,
    ))

    return plugin
