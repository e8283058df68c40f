"""
Module: insurance_kernel.repositories.contract_repository
Responsibility: SQLAlchemy persistence of the Contract aggregate (contract
    row plus its payments) and of individual payments, including the
    reconciliation filter queries.
Architecture position: Kernel > Repositories.

Failure modes:
    - ContractNotFoundError / PaymentNotFoundError from ``update`` when the
      row does not exist.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from uuid import UUID

from sqlalchemy import select

from insurance_kernel.domain.contract import (
    AWAITING_PAYMENT_STATUSES,
    TERMINAL_CONTRACT_STATUSES,
    Contract,
    ContractStatus,
)
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.values import DateRange
from insurance_kernel.exceptions import ContractNotFoundError, PaymentNotFoundError
from insurance_kernel.models.contract import ContractModel, PaymentModel
from insurance_kernel.repositories.base import SqlAlchemyRepository

_TERMINAL_VALUES = tuple(s.value for s in TERMINAL_CONTRACT_STATUSES)
_AWAITING_PAYMENT_VALUES = tuple(s.value for s in AWAITING_PAYMENT_STATUSES)


class SqlAlchemyContractRepository(SqlAlchemyRepository[ContractModel]):
    """Contract aggregate repository."""

    model = ContractModel

    def _sync_payments(self, model: ContractModel, contract: Contract) -> None:
        for payment in contract.payments:
            payment_model = self.session.get(PaymentModel, payment.id)
            if payment_model is None:
                payment_model = PaymentModel.from_entity(payment)
            else:
                payment_model.apply(payment)
            if payment_model not in model.payments:
                model.payments.append(payment_model)

    def _fetch(self, stmt) -> list[Contract]:
        return [m.to_entity() for m in self.session.scalars(stmt).all()]

    def add(self, contract: Contract) -> None:
        model = ContractModel.from_entity(contract)
        self.session.add(model)
        self._sync_payments(model, contract)
        self.session.flush()

    def update(self, contract: Contract) -> None:
        model = self._get_model(contract.id)
        if model is None:
            raise ContractNotFoundError(str(contract.id))
        model.apply(contract)
        self._sync_payments(model, contract)
        self.session.flush()

    def get_by_id(self, contract_id: UUID) -> Contract | None:
        model = self._get_model(contract_id)
        return model.to_entity() if model is not None else None

    def list_all(self) -> list[Contract]:
        return self._fetch(select(ContractModel).order_by(ContractModel.created_at))

    def get_by_client_id(self, client_id: UUID) -> list[Contract]:
        return self._fetch(
            select(ContractModel)
            .where(ContractModel.client_id == client_id)
            .order_by(ContractModel.created_at)
        )

    def get_by_status(self, status: ContractStatus) -> list[Contract]:
        return self._fetch(
            select(ContractModel)
            .where(ContractModel.status == status.value)
            .order_by(ContractModel.created_at)
        )

    def _ended_before(self, today: date):
        return (
            select(ContractModel)
            .where(ContractModel.end_date < today)
            .where(ContractModel.status.not_in(_TERMINAL_VALUES))
            .order_by(ContractModel.end_date)
        )

    def get_overdue_contracts(self, today: date) -> list[Contract]:
        return self._fetch(self._ended_before(today))

    def get_expired_contracts(self, today: date) -> list[Contract]:
        return self._fetch(self._ended_before(today))

    def get_unpaid_contracts(self, threshold: timedelta, now: datetime) -> list[Contract]:
        cutoff = now - threshold
        return self._fetch(
            select(ContractModel)
            .where(ContractModel.is_paid.is_(False))
            .where(ContractModel.status.in_(_AWAITING_PAYMENT_VALUES))
            .where(ContractModel.created_at < cutoff)
            .order_by(ContractModel.created_at)
        )

    def get_contracts_requiring_renewal(self, days: int, today: date) -> list[Contract]:
        window = DateRange(today, today + timedelta(days=days))
        return self._fetch(
            select(ContractModel)
            .where(ContractModel.status == ContractStatus.ACTIVE.value)
            .where(ContractModel.is_flagged_problem.is_(False))
            .where(ContractModel.end_date >= window.start)
            .where(ContractModel.end_date <= window.end)
            .order_by(ContractModel.end_date)
        )


class SqlAlchemyPaymentRepository(SqlAlchemyRepository[PaymentModel]):
    model = PaymentModel

    def add(self, payment: Payment) -> None:
        self.session.add(PaymentModel.from_entity(payment))
        self.session.flush()

    def update(self, payment: Payment) -> None:
        model = self._get_model(payment.id)
        if model is None:
            raise PaymentNotFoundError(str(payment.id))
        model.apply(payment)
        self.session.flush()

    def get_by_id(self, payment_id: UUID) -> Payment | None:
        model = self._get_model(payment_id)
        return model.to_entity() if model is not None else None

    def get_by_contract_id(self, contract_id: UUID) -> list[Payment]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.contract_id == contract_id)
            .order_by(PaymentModel.created_at)
        )
        return [m.to_entity() for m in self.session.scalars(stmt).all()]
