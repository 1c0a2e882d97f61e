from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..ai.service import AiLatency
from ..models.rules import PrioritizationWeights

"""Config loader.

Responsibilities:
- Load the YAML config (default config/alchemist.yml)
- Validate it against the JSON schema shipped next to this module
- Apply defaults for every optional key

Resolution order for the config path:
    1. explicit path (CLI --config)
    2. DATA_ALCHEMIST_CONFIG environment variable (may come from .env)
    3. config/alchemist.yml, silently skipped when absent
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/alchemist.yml")
CONFIG_ENV_VAR = "DATA_ALCHEMIST_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    output_directory: str = "./export"
    issue_log_directory: str = "./logs"
    latency: AiLatency = field(default_factory=AiLatency)
    weights: PrioritizationWeights = field(default_factory=PrioritizationWeights)
    source: Path | None = None  # 読み込んだ設定ファイル (デフォルト時 None)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = AppConfig()
    latency_raw = (data.get("ai") or {}).get("latency_seconds") or {}
    # スキーマ上 6.0 は integer として通るため、ここでも検証エラーを拾う
    try:
        latency = AiLatency(**{**asdict(defaults.latency), **latency_raw})
        weights = PrioritizationWeights.from_dict(data.get("weights") or {})
    except (TypeError, ValueError) as e:
        raise ConfigError(f"config validation failed: {e}") from e
    return AppConfig(
        output_directory=data.get("output_directory", defaults.output_directory),
        issue_log_directory=data.get("issue_log_directory", defaults.issue_log_directory),
        latency=latency,
        weights=weights,
        source=path,
    )


def resolve_config(explicit: Path | None = None) -> AppConfig:
    """Load the effective configuration (see module docstring for order)."""
    if explicit is not None:
        return load_config(explicit)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()
