"""
insurance_batch.domain.types -- Pure frozen dataclasses for reconciliation.

ZERO I/O.  Frozen dataclasses with enum outcome fields and tuples for
immutable collections.

Counting:
    Each pass reports the number of contracts whose outcome ``counts``
    (a problem found, or a contract expired).  Renewal reminders, clean
    contracts, skipped contracts and per-contract failures are reported but
    not counted.  Counts are defined per pass, so the overdue and
    data-integrity passes can both count the same contract, and the run
    total is their plain sum.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


# =============================================================================
# Policy
# =============================================================================


@dataclass(frozen=True)
class ReconciliationPolicy:
    """Thresholds for a reconciliation run.

    ``expire_problematic_contracts`` controls whether the expired pass also
    expires contracts that an earlier pass (or run) has flagged.  When it is
    off, a flagged contract stays Overdue / Problematic for a person to
    resolve and receives no expiry notice.
    """

    unpaid_threshold_days: int = 7
    renewal_window_days: int = 30
    expire_problematic_contracts: bool = True

    def __post_init__(self) -> None:
        if self.unpaid_threshold_days < 0:
            raise ValueError("unpaid_threshold_days must be >= 0")
        if self.renewal_window_days < 0:
            raise ValueError("renewal_window_days must be >= 0")


# =============================================================================
# Per-contract outcome
# =============================================================================


class ContractOutcome(str, Enum):
    """What a pass did with one contract."""

    PROBLEM = "problem"  # Problem found (flagged now or earlier)
    EXPIRED = "expired"  # Moved to Expired
    REMINDED = "reminded"  # Renewal reminder only
    CLEAN = "clean"  # Examined, nothing wrong
    SKIPPED = "skipped"  # Selected but left alone by policy
    FAILED = "failed"  # Exception, logged and isolated

    @property
    def counts(self) -> bool:
        return self in (ContractOutcome.PROBLEM, ContractOutcome.EXPIRED)


@dataclass(frozen=True)
class ContractCheckResult:
    """Immutable result of one pass over one contract."""

    contract_id: UUID
    number: str | None
    status: str  # Contract status after the pass
    outcome: ContractOutcome
    reason: str | None = None
    notified: bool = False
    error_code: str | None = None
    error_message: str | None = None


# =============================================================================
# Pass and run results
# =============================================================================


@dataclass(frozen=True)
class PassResult:
    """Outcome of one pass.  ``cancelled`` means remaining contracts were abandoned."""

    pass_name: str
    examined: int
    results: tuple[ContractCheckResult, ...] = ()
    cancelled: bool = False

    @property
    def count(self) -> int:
        return sum(1 for r in self.results if r.outcome.counts)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.outcome == ContractOutcome.FAILED)

    @property
    def notified(self) -> int:
        return sum(1 for r in self.results if r.notified)

    def result_for(self, contract_id: UUID) -> ContractCheckResult | None:
        for result in self.results:
            if result.contract_id == contract_id:
                return result
        return None


@dataclass(frozen=True)
class ReconciliationReport:
    """Summary of a whole run, one PassResult per pass that started."""

    run_id: UUID
    started_at: datetime
    completed_at: datetime
    passes: tuple[PassResult, ...] = ()
    cancelled: bool = False

    @property
    def total(self) -> int:
        return sum(p.count for p in self.passes)

    @property
    def notifications_sent(self) -> int:
        return sum(p.notified for p in self.passes)

    def pass_result(self, pass_name: str) -> PassResult | None:
        for result in self.passes:
            if result.pass_name == pass_name:
                return result
        return None

    def pass_count(self, pass_name: str) -> int:
        result = self.pass_result(pass_name)
        return result.count if result is not None else 0
