"""
Payment -- premium payment attempt and its gateway lifecycle.

Responsibility:
    Owns the Payment state machine: Created -> Processing -> Confirmed /
    Failed / Timeout, Confirmed -> Refunded, and the unconditional
    Chargeback / Timeout / Failed transitions a gateway callback may force.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Owned by a Contract (``Contract.payments``) and linked back through
    ``contract_id`` only; never holds a reference to the Contract object.

Invariants enforced:
    - amount > 0 (two decimal places), currency non-empty, contract_id set.
    - attempts only grows, by exactly one per ``mark_processing``.
    - ``mark_processing`` is legal only from Created, Failed or Timeout.
    - ``mark_refunded`` is legal only from Confirmed.
    - A confirmed payment always carries a non-empty ``psp_transaction_id``.

Failure modes:
    - ValidationError on construction or on an empty transaction id.
    - InvalidTransitionError on a guarded transition from the wrong state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import utc_now
from insurance_kernel.domain.values import Money
from insurance_kernel.domain.workflow import (
    Transition,
    Workflow,
    from_every_state,
    require_transition,
)
from insurance_kernel.exceptions import ValidationError


class PaymentStatus(str, Enum):
    """Gateway-facing lifecycle of a single payment attempt."""

    CREATED = "created"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CHARGEBACK = "chargeback"
    TIMEOUT = "timeout"


_PAYMENT_STATES = tuple(s.value for s in PaymentStatus)

PAYMENT_WORKFLOW = Workflow(
    name="payment",
    description="Premium payment processed through the payment gateway",
    initial_state=PaymentStatus.CREATED.value,
    states=_PAYMENT_STATES,
    transitions=(
        Transition("created", "processing", action="mark_processing"),
        Transition("failed", "processing", action="mark_processing"),
        Transition("timeout", "processing", action="mark_processing"),
        Transition("confirmed", "refunded", action="mark_refunded"),
        *from_every_state(_PAYMENT_STATES, "confirmed", "mark_confirmed"),
        *from_every_state(_PAYMENT_STATES, "failed", "mark_failed"),
        *from_every_state(_PAYMENT_STATES, "chargeback", "mark_chargeback"),
        *from_every_state(_PAYMENT_STATES, "timeout", "mark_timeout"),
    ),
    terminal_states=("refunded", "chargeback"),
)


@dataclass(eq=False)
class Payment:
    """
    A single premium payment.

    Construct new payments through ``Payment.create`` (validated); the
    plain constructor is reserved for rehydration from storage.
    ``last_error`` keeps the reason of the most recent failure.
    """

    id: UUID
    contract_id: UUID
    amount: Decimal
    currency: str
    status: PaymentStatus = PaymentStatus.CREATED
    psp_transaction_id: str | None = None
    idempotency_key: str | None = None
    attempts: int = 0
    last_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        contract_id: UUID | None,
        amount: Money | Decimal | str | int,
        currency: str = "RUB",
        idempotency_key: str | None = None,
        payment_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Payment:
        if contract_id is None:
            raise ValidationError("ContractId is required", field="contract_id")
        money = Money.of(amount, currency) if not isinstance(amount, Money) else amount
        if not money.is_positive:
            raise ValidationError("Amount must be positive", field="amount")
        stamp = now or utc_now()
        return cls(
            id=payment_id or uuid4(),
            contract_id=contract_id,
            amount=money.amount,
            currency=money.currency,
            idempotency_key=idempotency_key,
            created_at=stamp,
            updated_at=stamp,
        )

    @property
    def money(self) -> Money:
        return Money(self.amount, self.currency)

    @property
    def is_confirmed(self) -> bool:
        return self.status == PaymentStatus.CONFIRMED

    def _move(self, action: str, now: datetime | None) -> None:
        transition = require_transition(
            PAYMENT_WORKFLOW, "Payment", action, self.status.value,
        )
        self.status = PaymentStatus(transition.to_state)
        self.updated_at = now or utc_now()

    def mark_processing(self, now: datetime | None = None) -> None:
        """Start (or retry) a gateway attempt; counts the attempt."""
        self._move("mark_processing", now)
        self.attempts += 1

    def mark_confirmed(self, transaction_id: str, now: datetime | None = None) -> None:
        if not transaction_id or not transaction_id.strip():
            raise ValidationError(
                "Transaction id is required", field="psp_transaction_id",
            )
        self._move("mark_confirmed", now)
        self.psp_transaction_id = transaction_id

    def mark_failed(self, reason: str | None = None, now: datetime | None = None) -> None:
        self._move("mark_failed", now)
        self.last_error = reason

    def mark_refunded(self, now: datetime | None = None) -> None:
        self._move("mark_refunded", now)

    def mark_chargeback(self, now: datetime | None = None) -> None:
        self._move("mark_chargeback", now)

    def mark_timeout(self, now: datetime | None = None) -> None:
        self._move("mark_timeout", now)

    def __repr__(self) -> str:
        return (
            f"<Payment {self.id} {self.amount} {self.currency} "
            f"{self.status.value} attempts={self.attempts}>"
        )
