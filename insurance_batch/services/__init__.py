"""insurance_batch.services -- The reconciliation engine and its scheduler."""

from insurance_batch.services.reconciliation import ProblematicContractsChecker
from insurance_batch.services.scheduler import ReconciliationScheduler

__all__ = ["ProblematicContractsChecker", "ReconciliationScheduler"]
