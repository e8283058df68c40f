"""
AgencyConfig schema.

The human-authored, reviewable settings of one agency deployment.  YAML
files are parsed into these types by the loader; every type is a frozen
dataclass that rejects nonsense in ``__post_init__`` with ``ValueError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Where contracts live.  PostgreSQL in production, SQLite for dev/tests."""

    url: str = "sqlite:///insurance_agency.db"
    echo: bool = False

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("database.url must not be empty")


@dataclass(frozen=True)
class PaymentSettings:
    currency: str = "RUB"

    def __post_init__(self) -> None:
        if len(self.currency.strip()) != 3 or not self.currency.strip().isalpha():
            raise ValueError(f"payments.currency must be a 3-letter code, got {self.currency!r}")
        object.__setattr__(self, "currency", self.currency.strip().upper())


@dataclass(frozen=True)
class ReconciliationSettings:
    """Thresholds and cadence of the problematic-contracts job."""

    unpaid_threshold_days: int = 7
    renewal_window_days: int = 30
    interval_seconds: int = 3600
    start_delay_seconds: int = 30
    expire_problematic_contracts: bool = True

    def __post_init__(self) -> None:
        if self.unpaid_threshold_days < 0:
            raise ValueError("reconciliation.unpaid_threshold_days must be >= 0")
        if self.renewal_window_days < 0:
            raise ValueError("reconciliation.renewal_window_days must be >= 0")
        if self.interval_seconds <= 0:
            raise ValueError("reconciliation.interval_seconds must be > 0")
        if self.start_delay_seconds < 0:
            raise ValueError("reconciliation.start_delay_seconds must be >= 0")


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    def __post_init__(self) -> None:
        level = self.level.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"logging.level is not a logging level: {self.level!r}")
        object.__setattr__(self, "level", level)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgencyConfig:
    """Complete configuration of one deployment."""

    name: str = "insurance-agency"
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    payments: PaymentSettings = field(default_factory=PaymentSettings)
    reconciliation: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""  # SHA-256 of the source mapping, set by the loader

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must not be empty")
