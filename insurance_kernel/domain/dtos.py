"""
DTOs -- read projections handed to callers of the orchestration services.

Responsibility:
    Immutable snapshots of entities for the outer (web/API) layer, so that
    callers never hold a live, mutable aggregate.  ``PaymentOutcome`` is the
    value of a successful or gateway-declined payment.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``from_entity`` converters are only
    invoked from the service layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from insurance_kernel.domain.application import ContractApplication
from insurance_kernel.domain.contract import Contract
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.verification import DocumentVerification


@dataclass(frozen=True)
class PaymentInfo:
    id: UUID
    contract_id: UUID
    amount: Decimal
    currency: str
    status: str
    psp_transaction_id: str | None
    attempts: int
    created_at: datetime | None

    @classmethod
    def from_entity(cls, payment: Payment) -> PaymentInfo:
        return cls(
            id=payment.id,
            contract_id=payment.contract_id,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status.value,
            psp_transaction_id=payment.psp_transaction_id,
            attempts=payment.attempts,
            created_at=payment.created_at,
        )


@dataclass(frozen=True)
class ContractInfo:
    """Contract projection, including its payments."""

    id: UUID
    number: str | None
    client_id: UUID | None
    service_id: UUID | None
    agent_id: UUID | None
    start_date: date
    end_date: date
    premium_amount: Decimal
    premium_currency: str
    status: str
    is_paid: bool
    is_flagged_problem: bool
    notes: str | None
    created_at: datetime | None
    updated_at: datetime | None
    payments: tuple[PaymentInfo, ...] = ()

    @classmethod
    def from_entity(cls, contract: Contract) -> ContractInfo:
        return cls(
            id=contract.id,
            number=contract.number,
            client_id=contract.client_id,
            service_id=contract.service_id,
            agent_id=contract.agent_id,
            start_date=contract.start_date,
            end_date=contract.end_date,
            premium_amount=contract.premium.amount,
            premium_currency=contract.premium.currency,
            status=contract.status.value,
            is_paid=contract.is_paid,
            is_flagged_problem=contract.is_flagged_problem,
            notes=contract.notes,
            created_at=contract.created_at,
            updated_at=contract.updated_at,
            payments=tuple(PaymentInfo.from_entity(p) for p in contract.payments),
        )


@dataclass(frozen=True)
class VerificationInfo:
    id: UUID
    client_id: UUID
    document_type: str | None
    document_number: str | None
    status: str
    notes: str | None
    verified_by_agent_id: UUID | None
    verified_at: datetime | None

    @classmethod
    def from_entity(cls, verification: DocumentVerification) -> VerificationInfo:
        return cls(
            id=verification.id,
            client_id=verification.client_id,
            document_type=verification.document_type,
            document_number=verification.document_number,
            status=verification.status.value,
            notes=verification.notes,
            verified_by_agent_id=verification.verified_by_agent_id,
            verified_at=verification.verified_at,
        )


@dataclass(frozen=True)
class ApplicationInfo:
    id: UUID
    client_id: UUID
    service_id: UUID
    desired_start_date: datetime
    desired_end_date: datetime
    desired_premium: Decimal
    status: str
    notes: str | None
    processed_by_agent_id: UUID | None

    @classmethod
    def from_entity(cls, application: ContractApplication) -> ApplicationInfo:
        return cls(
            id=application.id,
            client_id=application.client_id,
            service_id=application.service_id,
            desired_start_date=application.desired_start_date,
            desired_end_date=application.desired_end_date,
            desired_premium=application.desired_premium,
            status=application.status.value,
            notes=application.notes,
            processed_by_agent_id=application.processed_by_agent_id,
        )


@dataclass(frozen=True)
class PaymentOutcome:
    """Result value of ``PaymentService.initiate_payment``."""

    payment_id: UUID
    contract_id: UUID
    payment_status: str
    transaction_id: str | None = None
    contract_status: str | None = None
    contract_activated: bool = False
