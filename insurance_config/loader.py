"""
Configuration Loader (``insurance_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the typed
``insurance_config.schema`` dataclasses, then applies the environment
overrides a deployment is allowed to make.  Runtime callers go through
``insurance_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on the kernel
or the batch package.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Unknown top-level sections are rejected, so a typo does not silently
  fall back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the source
  mapping for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong types or out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from insurance_config.schema import (
    AgencyConfig,
    DatabaseSettings,
    LoggingSettings,
    PaymentSettings,
    ReconciliationSettings,
)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "agency.yaml"

ENV_DATABASE_URL = "INSURANCE_DATABASE_URL"
ENV_LOG_LEVEL = "INSURANCE_LOG_LEVEL"

_SECTIONS = frozenset({"name", "database", "payments", "reconciliation", "logging"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"'{key}' must be a mapping")
    return value


def _int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def parse_database(data: Mapping[str, Any]) -> DatabaseSettings:
    defaults = DatabaseSettings()
    return DatabaseSettings(
        url=str(data.get("url", defaults.url)),
        echo=_bool(data.get("echo", defaults.echo), "database.echo"),
    )


def parse_payments(data: Mapping[str, Any]) -> PaymentSettings:
    return PaymentSettings(currency=str(data.get("currency", PaymentSettings().currency)))


def parse_reconciliation(data: Mapping[str, Any]) -> ReconciliationSettings:
    defaults = ReconciliationSettings()

    def get_int(key: str) -> int:
        return _int(data.get(key, getattr(defaults, key)), f"reconciliation.{key}")

    return ReconciliationSettings(
        unpaid_threshold_days=get_int("unpaid_threshold_days"),
        renewal_window_days=get_int("renewal_window_days"),
        interval_seconds=get_int("interval_seconds"),
        start_delay_seconds=get_int("start_delay_seconds"),
        expire_problematic_contracts=_bool(
            data.get("expire_problematic_contracts", defaults.expire_problematic_contracts),
            "reconciliation.expire_problematic_contracts",
        ),
    )


def parse_logging(data: Mapping[str, Any]) -> LoggingSettings:
    return LoggingSettings(level=str(data.get("level", LoggingSettings().level)))


def parse_config(data: Mapping[str, Any]) -> AgencyConfig:
    """
    Parse an ``AgencyConfig`` from a mapping.  Missing sections take defaults.

    Raises:
        ValueError: on unknown sections or invalid values.
    """
    unknown = set(data) - _SECTIONS
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")
    return AgencyConfig(
        name=str(data.get("name", AgencyConfig().name)),
        database=parse_database(_section(data, "database")),
        payments=parse_payments(_section(data, "payments")),
        reconciliation=parse_reconciliation(_section(data, "reconciliation")),
        logging=parse_logging(_section(data, "logging")),
        checksum=compute_checksum(dict(data)),
    )


def apply_env_overrides(
    config: AgencyConfig,
    environ: Mapping[str, str] | None = None,
) -> AgencyConfig:
    """Apply ``INSURANCE_DATABASE_URL`` and ``INSURANCE_LOG_LEVEL`` when set."""
    env = os.environ if environ is None else environ
    if env.get(ENV_DATABASE_URL):
        config = replace(config, database=replace(config.database, url=env[ENV_DATABASE_URL]))
    if env.get(ENV_LOG_LEVEL):
        config = replace(config, logging=LoggingSettings(level=env[ENV_LOG_LEVEL]))
    return config


def load_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AgencyConfig:
    """Load ``path`` (the packaged defaults when omitted) and apply overrides."""
    data = load_yaml_file(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    return apply_env_overrides(parse_config(data), environ)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization; identical input, identical hash."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
