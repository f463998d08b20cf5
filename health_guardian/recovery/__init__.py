"""
Config health checks and recovery.
"""

from .health import HealthEvaluator, read_config
from .controller import RecoveryController

__all__ = [
    "HealthEvaluator",
    "read_config",
    "RecoveryController",
]
