"""
Config Health Evaluator

Structural check only: the config must parse as JSON and contain the
required top-level keys. Field contents are not validated.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Tuple, Union

from ..errors import ConfigUnavailableError
from ..snapshots.models import HealthReport

logger = logging.getLogger("health_guardian.recovery.health")

MSG_OK = "OK"
MSG_MISSING = "Config file missing"
MSG_MISSING_FIELDS = "Config missing required fields"


def read_config(path: Union[str, Path]) -> Tuple[bytes, Any]:
    """
    Read and parse the live config.

    Returns:
        (raw bytes, parsed document)

    Raises:
        ConfigUnavailableError: If the file is absent, unreadable, not
            valid JSON, or an empty scalar (null, false, 0, "").
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigUnavailableError(str(path), e.strerror or str(e)) from e

    try:
        document = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise ConfigUnavailableError(str(path), f"invalid JSON: {e}") from e

    # null, false, 0 and "" count as no config; {} and [] do not
    if not isinstance(document, (dict, list)) and not document:
        raise ConfigUnavailableError(str(path), f"config is empty ({document!r})")

    return raw, document


class HealthEvaluator:
    """Reports whether the live config is structurally healthy."""

    def __init__(
        self,
        config_path: Union[str, Path],
        required_fields: Iterable[str] = ("models", "agents"),
    ):
        self.config_path = Path(config_path)
        self.required_fields = tuple(required_fields)

    def missing_fields(self, document: Any) -> list[str]:
        if not isinstance(document, dict):
            return list(self.required_fields)
        return [f for f in self.required_fields if f not in document]

    def evaluate(self) -> HealthReport:
        try:
            try:
                _, document = read_config(self.config_path)
            except ConfigUnavailableError as e:
                logger.warning(f"Health check failed: {e.message}")
                return HealthReport(healthy=False, message=MSG_MISSING)

            missing = self.missing_fields(document)
            if missing:
                logger.warning(f"Health check failed: missing fields {missing}")
                return HealthReport(healthy=False, message=MSG_MISSING_FIELDS)

            return HealthReport(healthy=True, message=MSG_OK)
        except Exception as e:
            logger.exception("Health check error")
            return HealthReport(healthy=False, message=f"Error: {e}")
