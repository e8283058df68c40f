"""
Data-integrity and client verification pass.

Looks at every contract, whatever its status, and collects what is wrong
with it: missing number, client or service, a premium that is not
positive, an end date before the start date, and the client's mandatory
personal data still pending or never approved.  A contract with problems
is flagged once with the reasons joined by "; ".  No notice is sent.
"""

from __future__ import annotations

from insurance_kernel.domain.contract import Contract
from insurance_kernel.domain.verification_policy import describe_verification_problems

from insurance_batch.domain.types import ContractCheckResult, ContractOutcome
from insurance_batch.passes.base import PassContext, check_result

PROBLEM_SEPARATOR = "; "


def contract_data_problems(contract: Contract) -> list[str]:
    problems: list[str] = []
    if not contract.number or not contract.number.strip():
        problems.append("Missing contract number")
    if contract.client_id is None:
        problems.append("Missing client")
    if contract.service_id is None:
        problems.append("Missing insurance service")
    if contract.premium is None or contract.premium.amount <= 0:
        problems.append("Premium amount must be positive")
    if (
        contract.start_date is not None
        and contract.end_date is not None
        and contract.end_date < contract.start_date
    ):
        problems.append("EndDate earlier than StartDate")
    return problems


class DataIntegrityPass:

    @property
    def name(self) -> str:
        return "data_integrity"

    @property
    def description(self) -> str:
        return "Flag contracts with invalid data or unverified client data"

    def select_contracts(self, context: PassContext) -> list[Contract]:
        return context.contracts.list_all()

    def check_contract(self, contract: Contract, context: PassContext) -> ContractCheckResult:
        verifications = (
            context.verifications.get_by_client_id(contract.client_id)
            if contract.client_id is not None
            else []
        )
        problems = contract_data_problems(contract) + describe_verification_problems(
            verifications
        )
        if not problems:
            return check_result(contract, ContractOutcome.CLEAN)

        reason = PROBLEM_SEPARATOR.join(problems)
        if not contract.is_flagged_problem:
            contract.mark_problematic(reason, now=context.now)
            context.persist(contract)
        return check_result(contract, ContractOutcome.PROBLEM, reason)
