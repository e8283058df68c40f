"""
Contract -- the insurance contract aggregate and its lifecycle.

Responsibility:
    Owns the Contract state machine (Draft -> Registered -> Paid -> Active,
    plus the Overdue / Suspended / Problematic / Cancelled / Expired side
    branches), the premium and coverage dates, the problem flag raised by
    reconciliation, the append-only notes log and the owned payments.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Holds client / agent / service only as ids.  Activation does NOT check
    client verifications itself: ContractService and PaymentService apply
    ``verification_policy`` before calling ``activate``.

Invariants enforced:
    - end_date >= start_date and premium > 0 for every validated
      construction and every renewal.
    - Transitions happen only through the named methods below; the guarded
      ones (register, activate, resume) consult ``CONTRACT_WORKFLOW``.
    - ``mark_as_paid`` is idempotent once ``is_paid`` is set.
    - ``renew`` always clears ``is_flagged_problem`` and returns to Registered.
    - Notes are append-only, joined with " | ".
    - Every mutating method stamps ``updated_at``; ``add_payment`` stamps
      it even when the payment is already attached.

Failure modes:
    - ValidationError on missing ids, end before start, non-positive premium
      or an empty contract number.
    - InvalidTransitionError on register / activate / resume from a state
      that does not allow it.

Rehydration:
    The dataclass constructor performs no validation so that rows which
    violate the invariants (legacy or hand-edited data) can still be loaded
    and reported by the data-integrity reconciliation pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import utc_now
from insurance_kernel.domain.payment import Payment
from insurance_kernel.domain.values import Money, append_note
from insurance_kernel.domain.workflow import (
    Guard,
    Transition,
    Workflow,
    from_every_state,
    require_transition,
)
from insurance_kernel.exceptions import ValidationError


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    DRAFT = "draft"
    REGISTERED = "registered"
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    ACTIVE = "active"
    OVERDUE = "overdue"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    PROBLEMATIC = "problematic"
    EXPIRED = "expired"
    COMPLETED = "completed"


# Logical ends: reconciliation never touches these.
TERMINAL_CONTRACT_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.CANCELLED,
    ContractStatus.EXPIRED,
    ContractStatus.COMPLETED,
})

# Statuses awaiting payment; mark_as_paid moves these to Paid.
AWAITING_PAYMENT_STATUSES: frozenset[ContractStatus] = frozenset({
    ContractStatus.REGISTERED,
    ContractStatus.PENDING_PAYMENT,
})

MANDATORY_DATA_VERIFIED = Guard(
    name="mandatory_data_verified",
    description="Client's FullName and Passport verifications are approved",
)

_CONTRACT_STATES = tuple(s.value for s in ContractStatus)

CONTRACT_WORKFLOW = Workflow(
    name="contract",
    description="Insurance contract lifecycle",
    initial_state=ContractStatus.DRAFT.value,
    states=_CONTRACT_STATES,
    transitions=(
        Transition("draft", "registered", action="register"),
        Transition("suspended", "registered", action="register"),
        Transition("registered", "paid", action="mark_as_paid"),
        Transition("pending_payment", "paid", action="mark_as_paid"),
        Transition("paid", "active", action="activate", guard=MANDATORY_DATA_VERIFIED),
        Transition("suspended", "registered", action="resume"),
        *from_every_state(_CONTRACT_STATES, "overdue", "mark_overdue"),
        *from_every_state(_CONTRACT_STATES, "suspended", "suspend"),
        *from_every_state(_CONTRACT_STATES, "problematic", "mark_problematic"),
        *from_every_state(_CONTRACT_STATES, "cancelled", "cancel"),
        *from_every_state(_CONTRACT_STATES, "expired", "expire"),
        *from_every_state(_CONTRACT_STATES, "registered", "renew"),
    ),
    terminal_states=tuple(s.value for s in TERMINAL_CONTRACT_STATUSES),
)


def _require_valid_terms(start_date: date, end_date: date, premium: Money | None) -> None:
    if start_date is None or end_date is None:
        raise ValidationError("StartDate and EndDate are required", field="start_date")
    if end_date < start_date:
        raise ValidationError("EndDate must be >= StartDate", field="end_date")
    if premium is None:
        raise ValidationError("Premium is required", field="premium")
    if not premium.is_positive:
        raise ValidationError("Premium amount must be positive", field="premium")


@dataclass(eq=False)
class Contract:
    """
    Insurance contract aggregate.

    Contract:
        Created in Draft via ``Contract.create`` and mutated exclusively
        through the transition methods.  Never deleted; Cancelled, Expired
        and Completed are logical ends.

    Guarantees:
        - ``payments`` holds each Payment at most once (by id).
        - ``is_flagged_problem`` is sticky until ``renew``.

    Non-goals:
        - Does NOT evaluate client verifications (service-layer gate).
        - Does NOT persist itself or send notifications.
    """

    id: UUID
    client_id: UUID | None
    service_id: UUID | None
    start_date: date
    end_date: date
    premium: Money
    status: ContractStatus = ContractStatus.DRAFT
    number: str | None = None
    agent_id: UUID | None = None
    is_paid: bool = False
    is_flagged_problem: bool = False
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    payments: list[Payment] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        client_id: UUID | None,
        service_id: UUID | None,
        start_date: date,
        end_date: date,
        premium: Money,
        notes: str | None = None,
        contract_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Contract:
        """Validated construction of a new Draft contract."""
        if client_id is None:
            raise ValidationError("ClientId is required", field="client_id")
        if service_id is None:
            raise ValidationError("ServiceId is required", field="service_id")
        _require_valid_terms(start_date, end_date, premium)
        stamp = now or utc_now()
        return cls(
            id=contract_id or uuid4(),
            client_id=client_id,
            service_id=service_id,
            start_date=start_date,
            end_date=end_date,
            premium=premium,
            notes=notes if notes and notes.strip() else None,
            created_at=stamp,
            updated_at=stamp,
        )

    # -- queries ------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_CONTRACT_STATUSES

    @property
    def display_number(self) -> str:
        """Contract number, or the id while the contract is unregistered."""
        return self.number or str(self.id)

    def can(self, action: str) -> bool:
        return CONTRACT_WORKFLOW.find(action, self.status.value) is not None

    # -- transitions --------------------------------------------------------

    def _touch(self, now: datetime | None) -> None:
        self.updated_at = now or utc_now()

    def _move(self, action: str, now: datetime | None) -> None:
        transition = require_transition(
            CONTRACT_WORKFLOW, "Contract", action, self.status.value,
        )
        self.status = ContractStatus(transition.to_state)
        self._touch(now)

    def _append_note(self, note: str | None) -> None:
        self.notes = append_note(self.notes, note)

    def register(
        self,
        number: str,
        agent_id: UUID | None,
        now: datetime | None = None,
    ) -> None:
        """Assign number and responsible agent.  Legal from Draft or Suspended."""
        if not number or not number.strip():
            raise ValidationError("Contract number is required", field="number")
        self._move("register", now)
        self.number = number
        self.agent_id = agent_id

    def mark_as_paid(self, now: datetime | None = None) -> None:
        """
        Record that the premium is paid.

        A contract awaiting payment moves to Paid; in any other status only
        the flag is set.  A second call is a no-op.
        """
        if self.is_paid:
            return
        self.is_paid = True
        if self.status in AWAITING_PAYMENT_STATUSES:
            self.status = ContractStatus.PAID
        self._touch(now)

    def activate(self, now: datetime | None = None) -> None:
        """Make a Paid contract effective.  Callers check verifications first."""
        self._move("activate", now)

    def mark_overdue(self, now: datetime | None = None) -> None:
        self._move("mark_overdue", now)

    def suspend(self, reason: str | None = None, now: datetime | None = None) -> None:
        self._move("suspend", now)
        self._append_note(f"Suspended: {reason}" if reason else "Suspended")

    def resume(self, now: datetime | None = None) -> None:
        """Return a Suspended contract to Registered."""
        self._move("resume", now)

    def mark_problematic(self, reason: str, now: datetime | None = None) -> None:
        self._move("mark_problematic", now)
        self.is_flagged_problem = True
        self._append_note(f"Problem: {reason}")

    def cancel(self, reason: str | None = None, now: datetime | None = None) -> None:
        self._move("cancel", now)
        self._append_note(f"Cancelled: {reason}" if reason else "Cancelled")

    def expire(self, now: datetime | None = None) -> None:
        self._move("expire", now)

    def renew(
        self,
        new_start: date,
        new_end: date,
        new_premium: Money,
        now: datetime | None = None,
    ) -> None:
        """Start a fresh term: new dates and premium, problem flag cleared."""
        _require_valid_terms(new_start, new_end, new_premium)
        self._move("renew", now)
        self.start_date = new_start
        self.end_date = new_end
        self.premium = new_premium
        self.is_flagged_problem = False

    def add_payment(self, payment: Payment, now: datetime | None = None) -> None:
        if payment is None:
            raise ValidationError("Payment is required", field="payment")
        if not any(p is payment or p.id == payment.id for p in self.payments):
            self.payments.append(payment)
        self._touch(now)

    def __repr__(self) -> str:
        return (
            f"<Contract {self.display_number} {self.status.value} "
            f"paid={self.is_paid} flagged={self.is_flagged_problem}>"
        )
