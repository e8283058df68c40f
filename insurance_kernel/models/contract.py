"""
Module: insurance_kernel.models.contract
Responsibility: ORM persistence for contracts and their payments.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - Contract numbers are unique once assigned (uq_contract_number).
    - premium_amount is never negative (ck_contract_premium_non_negative);
      zero is storable so the integrity pass can report it.
    - Payments belong to exactly one contract and are deleted with it.

Failure modes:
    - IntegrityError on a duplicate number or a negative premium.

Rehydration:
    ``to_entity`` builds the domain objects through their plain
    constructors (no validation), so rows that break the contract rules
    still load and can be flagged by reconciliation.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from insurance_kernel.db.base import Base, UUIDString
from insurance_kernel.domain.contract import Contract, ContractStatus
from insurance_kernel.domain.payment import Payment, PaymentStatus
from insurance_kernel.domain.values import Money


class ContractModel(Base):
    """
    Contract row.

    Contract:
        ``client_id`` / ``service_id`` are nullable at the storage level only
        so that damaged rows remain loadable; ``Contract.create`` never
        produces them.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        UniqueConstraint("number", name="uq_contract_number"),
        CheckConstraint("premium_amount >= 0", name="ck_contract_premium_non_negative"),
        Index("idx_contract_status", "status"),
        Index("idx_contract_client", "client_id"),
        Index("idx_contract_end_date", "end_date"),
    )

    number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    client_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("clients.id"), nullable=True,
    )
    agent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("agents.id"), nullable=True,
    )
    service_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("insurance_services.id"), nullable=True,
    )

    start_date: Mapped[date] = mapped_column(nullable=False)
    end_date: Mapped[date] = mapped_column(nullable=False)

    premium_amount: Mapped[Decimal] = mapped_column(nullable=False)
    premium_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="RUB")

    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=ContractStatus.DRAFT.value,
    )
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_flagged_problem: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    payments: Mapped[list["PaymentModel"]] = relationship(
        "PaymentModel",
        back_populates="contract",
        cascade="all",
        passive_deletes=True,
        order_by="PaymentModel.created_at",
        lazy="selectin",
    )

    def to_entity(self) -> Contract:
        return Contract(
            id=self.id,
            client_id=self.client_id,
            service_id=self.service_id,
            start_date=self.start_date,
            end_date=self.end_date,
            premium=Money(self.premium_amount, self.premium_currency),
            status=ContractStatus(self.status),
            number=self.number,
            agent_id=self.agent_id,
            is_paid=self.is_paid,
            is_flagged_problem=self.is_flagged_problem,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
            payments=[p.to_entity() for p in self.payments],
        )

    @classmethod
    def from_entity(cls, contract: Contract) -> ContractModel:
        model = cls(id=contract.id)
        model.apply(contract)
        return model

    def apply(self, contract: Contract) -> None:
        """Copy the contract's scalar state onto this row (payments excluded)."""
        self.number = contract.number
        self.client_id = contract.client_id
        self.agent_id = contract.agent_id
        self.service_id = contract.service_id
        self.start_date = contract.start_date
        self.end_date = contract.end_date
        self.premium_amount = contract.premium.amount
        self.premium_currency = contract.premium.currency
        self.status = contract.status.value
        self.is_paid = contract.is_paid
        self.is_flagged_problem = contract.is_flagged_problem
        self.notes = contract.notes
        self.created_at = contract.created_at
        self.updated_at = contract.updated_at

    def __repr__(self) -> str:
        return f"<Contract {self.number or self.id} {self.status}>"


class PaymentModel(Base):
    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_contract", "contract_id"),
        Index("idx_payment_status", "status"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.CREATED.value,
    )
    psp_transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    contract: Mapped[ContractModel] = relationship(
        "ContractModel", back_populates="payments",
    )

    def to_entity(self) -> Payment:
        return Payment(
            id=self.id,
            contract_id=self.contract_id,
            amount=self.amount,
            currency=self.currency,
            status=PaymentStatus(self.status),
            psp_transaction_id=self.psp_transaction_id,
            idempotency_key=self.idempotency_key,
            attempts=self.attempts,
            last_error=self.last_error,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, payment: Payment) -> PaymentModel:
        model = cls(id=payment.id)
        model.apply(payment)
        return model

    def apply(self, payment: Payment) -> None:
        self.contract_id = payment.contract_id
        self.amount = payment.amount
        self.currency = payment.currency
        self.status = payment.status.value
        self.psp_transaction_id = payment.psp_transaction_id
        self.idempotency_key = payment.idempotency_key
        self.attempts = payment.attempts
        self.last_error = payment.last_error
        self.created_at = payment.created_at
        self.updated_at = payment.updated_at

    def __repr__(self) -> str:
        return f"<Payment {self.id} {self.amount} {self.currency} {self.status}>"
