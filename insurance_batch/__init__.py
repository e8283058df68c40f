"""
insurance_batch -- Problematic-contracts reconciliation.

A periodic, idempotent job that walks the contract population in five
passes (overdue, unpaid, renewal due, expired, data integrity), flags
contracts that need human attention, expires contracts past their end date
and notifies clients.  ``ProblematicContractsChecker`` can be called
directly; ``ReconciliationScheduler`` wraps it in a cancellable background
loop with a start delay and a fixed interval.

Architecture:
    insurance_batch/ is a top-level package on top of insurance_kernel.
    Nothing in insurance_kernel imports from insurance_batch, and the
    batch package does not import insurance_config (the CLI maps the
    loaded settings onto ``ReconciliationPolicy``).
"""

from insurance_batch.domain.types import (
    ContractCheckResult,
    ContractOutcome,
    PassResult,
    ReconciliationPolicy,
    ReconciliationReport,
)
from insurance_batch.services.reconciliation import ProblematicContractsChecker
from insurance_batch.services.scheduler import ReconciliationScheduler

__all__ = [
    "ContractCheckResult",
    "ContractOutcome",
    "PassResult",
    "ProblematicContractsChecker",
    "ReconciliationPolicy",
    "ReconciliationReport",
    "ReconciliationScheduler",
]
