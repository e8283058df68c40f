"""
insurance_batch.passes -- The reconciliation passes and their registry.
"""

from insurance_batch.passes.base import (
    PassContext,
    PassRegistry,
    ReconciliationPass,
    default_pass_registry,
)
from insurance_batch.passes.integrity_pass import DataIntegrityPass, contract_data_problems
from insurance_batch.passes.lifecycle_passes import (
    OVERDUE_REASON,
    ExpiredPass,
    OverduePass,
    RenewalDuePass,
    UnpaidPass,
)

__all__ = [
    "OVERDUE_REASON",
    "DataIntegrityPass",
    "ExpiredPass",
    "OverduePass",
    "PassContext",
    "PassRegistry",
    "ReconciliationPass",
    "RenewalDuePass",
    "UnpaidPass",
    "contract_data_problems",
    "default_pass_registry",
]
