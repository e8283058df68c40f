"""
Reconciliation passes driven by contract dates and payment state.
"""

from __future__ import annotations

from datetime import timedelta
from functools import partial

from insurance_kernel.domain.contract import Contract, ContractStatus

from insurance_batch.domain.types import ContractCheckResult, ContractOutcome
from insurance_batch.notifications import (
    expired_notice,
    overdue_notice,
    renewal_notice,
    unpaid_notice,
)
from insurance_batch.passes.base import PassContext, check_result

OVERDUE_REASON = "Contract is overdue"


class OverduePass:
    """Ended but not closed: mark Overdue, flag once, notify."""

    @property
    def name(self) -> str:
        return "overdue"

    @property
    def description(self) -> str:
        return "Mark contracts past their end date as overdue and problematic"

    def select_contracts(self, context: PassContext) -> list[Contract]:
        return context.contracts.get_overdue_contracts(context.today)

    def check_contract(self, contract: Contract, context: PassContext) -> ContractCheckResult:
        if contract.status != ContractStatus.OVERDUE:
            contract.mark_overdue(now=context.now)
            context.persist(contract)

        if not contract.is_flagged_problem:
            contract.mark_problematic(OVERDUE_REASON, now=context.now)
            context.persist(contract)

        notified = context.notify(contract, overdue_notice)
        return check_result(contract, ContractOutcome.PROBLEM, OVERDUE_REASON, notified)


class UnpaidPass:
    """Registered too long ago without payment: flag once, notify."""

    @property
    def name(self) -> str:
        return "unpaid"

    @property
    def description(self) -> str:
        return "Flag registered contracts left unpaid past the threshold"

    def select_contracts(self, context: PassContext) -> list[Contract]:
        threshold = timedelta(days=context.policy.unpaid_threshold_days)
        return context.contracts.get_unpaid_contracts(threshold, context.now)

    def check_contract(self, contract: Contract, context: PassContext) -> ContractCheckResult:
        days = context.policy.unpaid_threshold_days
        reason = f"Contract unpaid for more than {days} days"

        if not contract.is_flagged_problem:
            contract.mark_problematic(reason, now=context.now)
            context.persist(contract)

        notified = context.notify(contract, partial(unpaid_notice, threshold_days=days))
        return check_result(contract, ContractOutcome.PROBLEM, reason, notified)


class RenewalDuePass:
    """Active contracts ending soon.  Reminder only, nothing is persisted."""

    @property
    def name(self) -> str:
        return "renewal_due"

    @property
    def description(self) -> str:
        return "Remind clients whose active contracts end within the renewal window"

    def select_contracts(self, context: PassContext) -> list[Contract]:
        return context.contracts.get_contracts_requiring_renewal(
            context.policy.renewal_window_days, context.today,
        )

    def check_contract(self, contract: Contract, context: PassContext) -> ContractCheckResult:
        notified = context.notify(
            contract,
            partial(renewal_notice, window_days=context.policy.renewal_window_days),
        )
        return check_result(
            contract,
            ContractOutcome.REMINDED,
            f"Ends on {contract.end_date:%d.%m.%Y}",
            notified,
        )


class ExpiredPass:
    """Ended but not closed: move to Expired, notify."""

    @property
    def name(self) -> str:
        return "expired"

    @property
    def description(self) -> str:
        return "Expire contracts past their end date"

    def select_contracts(self, context: PassContext) -> list[Contract]:
        return context.contracts.get_expired_contracts(context.today)

    def check_contract(self, contract: Contract, context: PassContext) -> ContractCheckResult:
        if contract.is_flagged_problem and not context.policy.expire_problematic_contracts:
            return check_result(
                contract, ContractOutcome.SKIPPED, "Flagged contract left for review",
            )

        if contract.status != ContractStatus.EXPIRED:
            contract.expire(now=context.now)
            context.persist(contract)

        notified = context.notify(contract, expired_notice)
        return check_result(contract, ContractOutcome.EXPIRED, None, notified)
