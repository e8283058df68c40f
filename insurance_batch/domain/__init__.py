"""
insurance_batch.domain -- Pure types for the reconciliation job.

ZERO I/O.  Results are frozen dataclasses.
"""

from insurance_batch.domain.types import (
    ContractCheckResult,
    ContractOutcome,
    PassResult,
    ReconciliationPolicy,
    ReconciliationReport,
)

__all__ = [
    "ContractCheckResult",
    "ContractOutcome",
    "PassResult",
    "ReconciliationPolicy",
    "ReconciliationReport",
]
