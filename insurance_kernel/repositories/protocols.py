"""
Repository protocols -- the persistence contracts the services depend on.

Responsibility:
    Declares what orchestration services and the reconciliation engine need
    from storage: CRUD by id, the reconciliation filter queries and a unit
    of work (``save_changes`` / ``discard_changes``).  Every query returns
    the full matching set of domain entities (no pagination).

Architecture position:
    Kernel > Repositories.  Protocols reference domain types only, so
    services can be exercised against any implementation (SQLAlchemy in
    production, fakes in tests).

Determinism:
    Filter queries take the reference date or instant explicitly instead of
    reading the clock, so a reconciliation run is reproducible.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol, runtime_checkable
from uuid import UUID

from insurance_kernel.domain.application import ApplicationStatus, ContractApplication
from insurance_kernel.domain.contract import Contract, ContractStatus
from insurance_kernel.domain.parties import Agent, Client, InsuranceService, OperationRecord
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.verification import DocumentVerification


@runtime_checkable
class UnitOfWork(Protocol):
    def save_changes(self) -> None:
        """Commit pending writes."""
        ...

    def discard_changes(self) -> None:
        """Roll back pending writes."""
        ...


@runtime_checkable
class ContractRepository(UnitOfWork, Protocol):
    def add(self, contract: Contract) -> None: ...

    def update(self, contract: Contract) -> None: ...

    def get_by_id(self, contract_id: UUID) -> Contract | None: ...

    def list_all(self) -> list[Contract]: ...

    def get_by_client_id(self, client_id: UUID) -> list[Contract]: ...

    def get_by_status(self, status: ContractStatus) -> list[Contract]: ...

    def get_overdue_contracts(self, today: date) -> list[Contract]:
        """end_date < today and status not Expired / Cancelled / Completed."""
        ...

    def get_unpaid_contracts(self, threshold: timedelta, now: datetime) -> list[Contract]:
        """Unpaid, awaiting payment, and created before ``now - threshold``."""
        ...

    def get_contracts_requiring_renewal(self, days: int, today: date) -> list[Contract]:
        """Active, unflagged, ending within [today, today + days]."""
        ...

    def get_expired_contracts(self, today: date) -> list[Contract]:
        """end_date < today and status not Expired / Cancelled / Completed."""
        ...


@runtime_checkable
class PaymentRepository(UnitOfWork, Protocol):
    def add(self, payment: Payment) -> None: ...

    def update(self, payment: Payment) -> None: ...

    def get_by_id(self, payment_id: UUID) -> Payment | None: ...

    def get_by_contract_id(self, contract_id: UUID) -> list[Payment]: ...


@runtime_checkable
class ClientRepository(UnitOfWork, Protocol):
    def add(self, client: Client) -> None: ...

    def update(self, client: Client) -> None: ...

    def get_by_id(self, client_id: UUID) -> Client | None: ...

    def get_by_email(self, email: str) -> Client | None: ...

    def list_all(self) -> list[Client]: ...


@runtime_checkable
class AgentRepository(UnitOfWork, Protocol):
    def add(self, agent: Agent) -> None: ...

    def get_by_id(self, agent_id: UUID) -> Agent | None: ...

    def list_all(self) -> list[Agent]: ...


@runtime_checkable
class InsuranceServiceRepository(UnitOfWork, Protocol):
    def add(self, service: InsuranceService) -> None: ...

    def get_by_id(self, service_id: UUID) -> InsuranceService | None: ...

    def list_all(self) -> list[InsuranceService]: ...


@runtime_checkable
class VerificationRepository(UnitOfWork, Protocol):
    def add(self, verification: DocumentVerification) -> None: ...

    def update(self, verification: DocumentVerification) -> None: ...

    def get_by_id(self, verification_id: UUID) -> DocumentVerification | None: ...

    def get_by_client_id(self, client_id: UUID) -> list[DocumentVerification]: ...


@runtime_checkable
class ApplicationRepository(UnitOfWork, Protocol):
    def add(self, application: ContractApplication) -> None: ...

    def update(self, application: ContractApplication) -> None: ...

    def get_by_id(self, application_id: UUID) -> ContractApplication | None: ...

    def list_all(self) -> list[ContractApplication]: ...

    def get_by_status(self, status: ApplicationStatus) -> list[ContractApplication]: ...


@runtime_checkable
class OperationHistoryRepository(UnitOfWork, Protocol):
    def add(self, record: OperationRecord) -> None: ...

    def get_by_user_id(self, user_id: UUID) -> list[OperationRecord]: ...

    def get_by_entity_id(self, entity_id: UUID) -> list[OperationRecord]: ...
