"""
Config -> Batch and Service Bridges.

Functions that turn ``AgencyConfig`` settings into the inputs the batch
package and the kernel services expect.  They live here because neither
insurance_batch nor insurance_kernel may import insurance_config.

Usage:
    config = get_active_config()
    checker = ProblematicContractsChecker.for_session(
        session, policy=reconciliation_policy(config),
    )
    payments = payment_service(config, Repositories.for_session(session))
"""

from __future__ import annotations

from insurance_batch.domain.types import ReconciliationPolicy
from insurance_kernel.domain.clock import Clock
from insurance_kernel.external.payment_gateway import PaymentGateway
from insurance_kernel.repositories import Repositories
from insurance_kernel.services.payment_service import PaymentService

from insurance_config.schema import AgencyConfig


def reconciliation_policy(config: AgencyConfig) -> ReconciliationPolicy:
    settings = config.reconciliation
    return ReconciliationPolicy(
        unpaid_threshold_days=settings.unpaid_threshold_days,
        renewal_window_days=settings.renewal_window_days,
        expire_problematic_contracts=settings.expire_problematic_contracts,
    )


def payment_service(
    config: AgencyConfig,
    repositories: Repositories,
    gateway: PaymentGateway | None = None,
    clock: Clock | None = None,
) -> PaymentService:
    """PaymentService charging in the configured currency."""
    return PaymentService(
        repositories, clock=clock, gateway=gateway, currency=config.payments.currency,
    )
