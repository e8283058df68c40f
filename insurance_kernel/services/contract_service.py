"""
ContractService -- orchestration of the contract lifecycle.

Responsibility:
    Creates contracts (auto-registered with a generated number), registers,
    activates behind the verification gate, suspends, resumes, cancels and
    renews them, and serves read projections.

Architecture position:
    Kernel > Services -- imperative shell over the Contract state machine
    and ``verification_policy``.

Invariants enforced:
    - A contract is only activated after the full three-stage verification
      gate passes for its client.
    - Contract numbers have the form ``CTR-yyyyMMdd-xxxxxx`` (UTC date,
      six hex characters).
    - Each operation is load -> transition -> persist; nothing is persisted
      when the transition or gate refuses.

Failure modes (returned as OperationResult, never raised):
    - NOT_FOUND: contract, client, service or agent is missing.
    - VALIDATION_FAILED: bad dates, premium or number.
    - DOMAIN_REJECTED: illegal transition, or the verification gate refused
      activation (message carries the Russian user-facing reason).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from insurance_kernel.domain.contract import Contract
from insurance_kernel.domain.dtos import ContractInfo
from insurance_kernel.domain.values import Money
from insurance_kernel.domain.verification_policy import require_activation_allowed
from insurance_kernel.exceptions import (
    AgentNotFoundError,
    ClientNotFoundError,
    ContractNotFoundError,
    InsuranceServiceNotFoundError,
)
from insurance_kernel.logging_config import LogContext, get_logger
from insurance_kernel.services.base import BaseService
from insurance_kernel.services.results import OperationResult

logger = get_logger("services.contract")


def generate_contract_number(now: datetime) -> str:
    """``CTR-{yyyyMMdd}-{6 hex chars}`` from the UTC date of ``now``."""
    return f"CTR-{now:%Y%m%d}-{uuid4().hex[:6]}"


class ContractService(BaseService):
    """Contract orchestration.  Every mutating call returns an OperationResult."""

    def _load(self, contract_id: UUID) -> Contract:
        contract = self._repos.contracts.get_by_id(contract_id)
        if contract is None:
            raise ContractNotFoundError(str(contract_id))
        return contract

    def _persist(self, contract: Contract) -> ContractInfo:
        self._repos.contracts.update(contract)
        self._save()
        return ContractInfo.from_entity(contract)

    # -- commands -----------------------------------------------------------

    def create_contract(
        self,
        client_id: UUID,
        service_id: UUID,
        start_date: date,
        end_date: date,
        premium_amount: Decimal | str | int,
        agent_id: UUID,
        premium_currency: str = "RUB",
        notes: str | None = None,
    ) -> OperationResult[ContractInfo]:
        """Create a Draft contract and immediately register it under ``agent_id``."""

        def work() -> ContractInfo:
            if self._repos.clients.get_by_id(client_id) is None:
                raise ClientNotFoundError(str(client_id))
            if self._repos.services.get_by_id(service_id) is None:
                raise InsuranceServiceNotFoundError(str(service_id))
            if self._repos.agents.get_by_id(agent_id) is None:
                raise AgentNotFoundError(str(agent_id))

            now = self._now()
            contract = Contract.create(
                client_id=client_id,
                service_id=service_id,
                start_date=start_date,
                end_date=end_date,
                premium=Money.of(premium_amount, premium_currency),
                notes=notes,
                now=now,
            )
            contract.register(generate_contract_number(now), agent_id, now=now)
            self._repos.contracts.add(contract)
            self._record(
                agent_id,
                "CreateContract",
                f"Created contract {contract.number}",
                contract.id,
                "Contract",
            )
            self._save()
            return ContractInfo.from_entity(contract)

        return self._execute(
            "create_contract", work, client_id=client_id, agent_id=agent_id,
        )

    def register_contract(
        self,
        contract_id: UUID,
        number: str,
        agent_id: UUID,
    ) -> OperationResult[ContractInfo]:
        def work() -> ContractInfo:
            contract = self._load(contract_id)
            contract.register(number, agent_id, now=self._now())
            self._record(
                agent_id, "RegisterContract", f"Registered contract {number}",
                contract.id, "Contract",
            )
            return self._persist(contract)

        return self._execute("register_contract", work, contract_id=contract_id)

    def activate_contract(
        self,
        contract_id: UUID,
        actor_id: UUID | None = None,
    ) -> OperationResult[ContractInfo]:
        """
        Activate a Paid contract once the client's mandatory data is verified.

        The gate runs before the state check, so an unverified client is
        reported even when the contract is not yet Paid.
        """

        def work() -> ContractInfo:
            contract = self._load(contract_id)
            with LogContext.contract(contract):
                verifications = (
                    self._repos.verifications.get_by_client_id(contract.client_id)
                    if contract.client_id is not None
                    else []
                )
                require_activation_allowed(verifications)
                contract.activate(now=self._now())
                self._record(
                    actor_id, "ActivateContract",
                    f"Activated contract {contract.display_number}",
                    contract.id, "Contract",
                )
                return self._persist(contract)

        return self._execute("activate_contract", work, contract_id=contract_id, actor_id=actor_id)

    def suspend_contract(
        self,
        contract_id: UUID,
        reason: str | None = None,
        actor_id: UUID | None = None,
    ) -> OperationResult[ContractInfo]:
        def work() -> ContractInfo:
            contract = self._load(contract_id)
            contract.suspend(reason, now=self._now())
            self._record(
                actor_id, "SuspendContract",
                f"Suspended contract {contract.display_number}", contract.id, "Contract",
            )
            return self._persist(contract)

        return self._execute("suspend_contract", work, contract_id=contract_id, actor_id=actor_id)

    def resume_contract(
        self,
        contract_id: UUID,
        actor_id: UUID | None = None,
    ) -> OperationResult[ContractInfo]:
        def work() -> ContractInfo:
            contract = self._load(contract_id)
            contract.resume(now=self._now())
            self._record(
                actor_id, "ResumeContract",
                f"Resumed contract {contract.display_number}", contract.id, "Contract",
            )
            return self._persist(contract)

        return self._execute("resume_contract", work, contract_id=contract_id, actor_id=actor_id)

    def cancel_contract(
        self,
        contract_id: UUID,
        reason: str | None = None,
        actor_id: UUID | None = None,
    ) -> OperationResult[ContractInfo]:
        def work() -> ContractInfo:
            contract = self._load(contract_id)
            contract.cancel(reason, now=self._now())
            self._record(
                actor_id, "CancelContract",
                f"Cancelled contract {contract.display_number}", contract.id, "Contract",
            )
            return self._persist(contract)

        return self._execute("cancel_contract", work, contract_id=contract_id, actor_id=actor_id)

    def renew_contract(
        self,
        contract_id: UUID,
        new_start: date,
        new_end: date,
        new_premium_amount: Decimal | str | int,
        actor_id: UUID | None = None,
    ) -> OperationResult[ContractInfo]:
        """Renew in the contract's currency; clears the problem flag."""

        def work() -> ContractInfo:
            contract = self._load(contract_id)
            premium = Money.of(new_premium_amount, contract.premium.currency)
            contract.renew(new_start, new_end, premium, now=self._now())
            self._record(
                actor_id, "RenewContract",
                f"Renewed contract {contract.display_number} until {new_end:%d.%m.%Y}",
                contract.id, "Contract",
            )
            return self._persist(contract)

        return self._execute("renew_contract", work, contract_id=contract_id, actor_id=actor_id)

    # -- queries ------------------------------------------------------------

    def get_all(self) -> list[ContractInfo]:
        return [ContractInfo.from_entity(c) for c in self._repos.contracts.list_all()]

    def get_by_id(self, contract_id: UUID) -> ContractInfo | None:
        contract = self._repos.contracts.get_by_id(contract_id)
        return ContractInfo.from_entity(contract) if contract is not None else None

    def get_by_client(self, client_id: UUID) -> list[ContractInfo]:
        return [
            ContractInfo.from_entity(c)
            for c in self._repos.contracts.get_by_client_id(client_id)
        ]
