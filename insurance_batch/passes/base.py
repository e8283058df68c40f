"""
ReconciliationPass protocol, PassContext, and PassRegistry.

Contract:
    ``ReconciliationPass`` defines the interface every pass implements.
    ``PassRegistry`` keeps registered passes in registration order, which
    is the order the engine runs them in.
    ``default_pass_registry()`` returns the five standard passes.

Architecture:
    insurance_batch/passes.  Imports insurance_kernel domain types, the
    repository protocols and the notification port only.  The engine owns
    iteration, cancellation and error isolation; a pass handles exactly one
    contract per ``check_contract`` call.

Invariants enforced:
    - One pass per ``name``.
    - A pass persists each transition before moving on (update, then
      ``save_changes``), and sends its notice after persisting.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol, runtime_checkable

from insurance_kernel.domain.contract import Contract
from insurance_kernel.domain.parties import Client
from insurance_kernel.external.notifications import NotificationSender
from insurance_kernel.repositories.protocols import (
    ClientRepository,
    ContractRepository,
    VerificationRepository,
)

from insurance_batch.domain.types import (
    ContractCheckResult,
    ContractOutcome,
    ReconciliationPolicy,
)
from insurance_batch.notifications import Notice


# =============================================================================
# PassContext
# =============================================================================


@dataclass(frozen=True)
class PassContext:
    """Everything a pass needs for one run.

    ``now`` and ``today`` are taken once from the injected clock at the
    start of the run so every pass sees the same reference instant.
    """

    now: datetime
    today: date
    policy: ReconciliationPolicy
    contracts: ContractRepository
    clients: ClientRepository
    verifications: VerificationRepository
    notifier: NotificationSender

    def persist(self, contract: Contract) -> None:
        self.contracts.update(contract)
        self.contracts.save_changes()

    def client_of(self, contract: Contract) -> Client | None:
        if contract.client_id is None:
            return None
        return self.clients.get_by_id(contract.client_id)

    def notify(
        self,
        contract: Contract,
        build: Callable[[Contract, Client | None], Notice],
    ) -> bool:
        """Send a notice to the contract's client.  False when there is no email."""
        client = self.client_of(contract)
        if client is None or not client.email:
            return False
        notice = build(contract, client)
        self.notifier.send(client.email, notice.subject, notice.body)
        return True


def check_result(
    contract: Contract,
    outcome: ContractOutcome,
    reason: str | None = None,
    notified: bool = False,
) -> ContractCheckResult:
    return ContractCheckResult(
        contract_id=contract.id,
        number=contract.number,
        status=contract.status.value,
        outcome=outcome,
        reason=reason,
        notified=notified,
    )


# =============================================================================
# ReconciliationPass Protocol
# =============================================================================


@runtime_checkable
class ReconciliationPass(Protocol):
    """Protocol for one reconciliation pass.

    Contract:
        - ``name``: unique key, also the prefix of the pass's log events.
        - ``description``: human-readable label.
        - ``select_contracts()``: the contracts this pass looks at.
        - ``check_contract()``: handle ONE contract and describe the outcome.

    Non-goals:
        - Does NOT catch exceptions -- the engine isolates per-contract
          failures and discards the pending unit of work.
        - Does NOT check for cancellation -- the engine does, between
          contracts.
    """

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    def select_contracts(self, context: PassContext) -> list[Contract]: ...

    def check_contract(
        self,
        contract: Contract,
        context: PassContext,
    ) -> ContractCheckResult: ...


# =============================================================================
# PassRegistry
# =============================================================================


class PassRegistry:
    """Ordered registry of reconciliation passes.

    Contract:
        - ``register()`` appends a pass; raises ValueError on duplicate name.
        - ``get()`` retrieves by name; raises KeyError if missing.
        - ``passes()`` returns the passes in registration order.
    """

    def __init__(self) -> None:
        self._passes: dict[str, ReconciliationPass] = {}

    def register(self, reconciliation_pass: ReconciliationPass) -> None:
        """Register a pass.

        Raises:
            ValueError: If a pass with the same name is already registered.
        """
        if reconciliation_pass.name in self._passes:
            raise ValueError(
                f"Pass '{reconciliation_pass.name}' is already registered"
            )
        self._passes[reconciliation_pass.name] = reconciliation_pass

    def get(self, name: str) -> ReconciliationPass:
        try:
            return self._passes[name]
        except KeyError:
            raise KeyError(
                f"No pass registered under '{name}'. "
                f"Available: {list(self._passes)}"
            ) from None

    def passes(self) -> tuple[ReconciliationPass, ...]:
        return tuple(self._passes.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._passes)

    def __len__(self) -> int:
        return len(self._passes)

    def __contains__(self, name: str) -> bool:
        return name in self._passes


def default_pass_registry() -> PassRegistry:
    """Overdue, unpaid, renewal due, expired, data integrity -- in that order."""
    from insurance_batch.passes.integrity_pass import DataIntegrityPass
    from insurance_batch.passes.lifecycle_passes import (
        ExpiredPass,
        OverduePass,
        RenewalDuePass,
        UnpaidPass,
    )

    registry = PassRegistry()
    registry.register(OverduePass())
    registry.register(UnpaidPass())
    registry.register(RenewalDuePass())
    registry.register(ExpiredPass())
    registry.register(DataIntegrityPass())
    return registry
