"""
Configuration management for Health Guardian.

Paths are derived once from the OpenClaw state directory and passed to the
RecoveryController explicitly. Optional YAML configuration supports
environment variable expansion.
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any

import yaml


STATE_DIR_ENV = "OPENCLAW_STATE_DIR"


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8790


@dataclass
class RetentionConfig:
    """Snapshot retention configuration."""
    max_automatic: int = 10
    # Reasons kept forever; everything else shares the max_automatic cap
    protected_reasons: List[str] = field(default_factory=lambda: ["manual"])


@dataclass
class GuardianConfig:
    """Root configuration for Health Guardian."""
    state_dir: Path = field(default_factory=Path)
    config_filename: str = "openclaw.json"
    snapshot_dirname: str = "snapshots"
    required_fields: List[str] = field(default_factory=lambda: ["models", "agents"])
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def __post_init__(self):
        self.state_dir = Path(self.state_dir)

    @property
    def config_path(self) -> Path:
        return self.state_dir / self.config_filename

    @property
    def snapshot_dir(self) -> Path:
        return self.state_dir / self.snapshot_dirname

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "GuardianConfig":
        """Build config from OPENCLAW_STATE_DIR (empty means current directory)."""
        environ = os.environ if environ is None else environ
        return cls(state_dir=Path(environ.get(STATE_DIR_ENV, "")))


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values."""
    if isinstance(value, str):
        # Match ${VAR} or $VAR patterns
        pattern = r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)'

        def replace(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


def parse_config(data: Dict[str, Any], state_dir: Optional[str | Path] = None) -> GuardianConfig:
    """Parse a GuardianConfig from a dict.

    An explicit state_dir wins over the one in the data; when neither is
    given the environment default applies.
    """
    defaults = GuardianConfig()

    retention_data = data.get("retention") or {}
    retention = RetentionConfig(
        max_automatic=int(retention_data.get("max_automatic", 10)),
        protected_reasons=list(retention_data.get("protected_reasons", ["manual"])),
    )
    if retention.max_automatic < 0:
        raise ValueError(f"retention.max_automatic must be >= 0, got {retention.max_automatic}")

    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", defaults.server.host),
        port=int(server_data.get("port", defaults.server.port)),
    )

    if state_dir is None:
        state_dir = data.get("state_dir") or GuardianConfig.from_env().state_dir

    return GuardianConfig(
        state_dir=Path(state_dir),
        config_filename=data.get("config_filename", defaults.config_filename),
        snapshot_dirname=data.get("snapshot_dirname", defaults.snapshot_dirname),
        required_fields=list(data.get("required_fields", defaults.required_fields)),
        retention=retention,
        server=server,
    )


def load_config(path: str | Path, state_dir: Optional[str | Path] = None) -> GuardianConfig:
    """Load configuration from YAML file."""
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    # Expand environment variables
    data = expand_env_vars(raw)

    return parse_config(data, state_dir=state_dir)


def create_default_config() -> str:
    """Generate default configuration YAML."""
    return """# Health Guardian Configuration

# OpenClaw state directory (defaults to $OPENCLAW_STATE_DIR)
# state_dir: ${OPENCLAW_STATE_DIR}

config_filename: openclaw.json
snapshot_dirname: snapshots

# Top-level keys a healthy config must contain
required_fields:
  - models
  - agents

retention:
  # Newest non-manual snapshots to keep (auto, startup, pre-restore)
  max_automatic: 10
  protected_reasons:
    - manual

server:
  host: 127.0.0.1
  port: 8790
"""
