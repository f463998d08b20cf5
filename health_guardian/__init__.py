"""
Health Guardian - Config Snapshots and Auto-Recovery for OpenClaw

Keeps point-in-time snapshots of the gateway config, checks that the live
config is structurally healthy, and rolls back to the newest manual
snapshot on demand.
"""

__version__ = "0.1.0"

from .config import GuardianConfig, load_config
from .recovery import RecoveryController, HealthEvaluator
from .plugin import register

__all__ = [
    "__version__",
    "GuardianConfig",
    "load_config",
    "RecoveryController",
    "HealthEvaluator",
    "register",
]
