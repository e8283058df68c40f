"""
insurance_config -- single public entrypoint for deployment settings.

Responsibility:
    ``get_active_config()`` returns the process-wide ``AgencyConfig``:
    the YAML settings file (the packaged defaults unless a path is given)
    with environment overrides applied.  The result is cached until
    ``reset_active_config()``.

Architecture position:
    Configuration layer, above ``insurance_kernel`` and
    ``insurance_batch``.  Neither of them imports from here; the bridges
    and the CLI hand settings down.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``ValueError`` -- unknown sections or invalid values.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from insurance_config.loader import DEFAULT_CONFIG_PATH, load_config
from insurance_config.schema import (
    AgencyConfig,
    DatabaseSettings,
    LoggingSettings,
    PaymentSettings,
    ReconciliationSettings,
)

_logger = logging.getLogger("insurance_kernel.config")

_lock = threading.Lock()
_active: AgencyConfig | None = None


def get_active_config(config_path: Path | str | None = None) -> AgencyConfig:
    """Load the configuration once per process and return it.

    ``config_path`` is only consulted on the first call (or the first call
    after ``reset_active_config()``).  An ``INSURANCE_CONFIG_TRACE`` log
    entry is emitted whenever the file is actually loaded.
    """
    global _active
    with _lock:
        if _active is None:
            _active = load_config(config_path)
            _logger.info(
                "INSURANCE_CONFIG_TRACE",
                extra={
                    "trace_type": "INSURANCE_CONFIG_TRACE",
                    "config_name": _active.name,
                    "config_path": str(config_path or DEFAULT_CONFIG_PATH),
                    "checksum": _active.checksum,
                },
            )
        return _active


def reset_active_config() -> None:
    """Forget the cached configuration (tests, reloads)."""
    global _active
    with _lock:
        _active = None


__all__ = [
    "AgencyConfig",
    "DatabaseSettings",
    "LoggingSettings",
    "PaymentSettings",
    "ReconciliationSettings",
    "get_active_config",
    "load_config",
    "reset_active_config",
]
