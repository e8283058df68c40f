"""
ContractApplication -- a client's request for a contract, before one exists.

Lifecycle: Pending -> Approved -> Processed, or Pending -> Rejected.
Processing is what turns an approved application into a Draft contract;
``ApplicationService`` does that, this module only guards the states.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import utc_now
from insurance_kernel.domain.values import Money, append_note
from insurance_kernel.domain.workflow import Transition, Workflow, require_transition
from insurance_kernel.exceptions import ValidationError


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"


APPLICATION_WORKFLOW = Workflow(
    name="contract_application",
    description="Client request reviewed by an agent before a contract is drawn up",
    initial_state=ApplicationStatus.PENDING.value,
    states=tuple(s.value for s in ApplicationStatus),
    transitions=(
        Transition("pending", "approved", action="approve"),
        Transition("pending", "rejected", action="reject"),
        Transition("approved", "processed", action="process"),
    ),
    terminal_states=("rejected", "processed"),
)


@dataclass(eq=False)
class ContractApplication:
    id: UUID
    client_id: UUID
    service_id: UUID
    desired_start_date: datetime
    desired_end_date: datetime
    desired_premium: Decimal
    status: ApplicationStatus = ApplicationStatus.PENDING
    notes: str | None = None
    processed_by_agent_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        client_id: UUID | None,
        service_id: UUID | None,
        desired_start_date: datetime,
        desired_end_date: datetime,
        desired_premium: Decimal | str | int,
        notes: str | None = None,
        application_id: UUID | None = None,
        now: datetime | None = None,
    ) -> ContractApplication:
        if client_id is None:
            raise ValidationError("ClientId is required", field="client_id")
        if service_id is None:
            raise ValidationError("ServiceId is required", field="service_id")
        if desired_end_date < desired_start_date:
            raise ValidationError(
                "DesiredEndDate must be >= DesiredStartDate", field="desired_end_date",
            )
        premium = Money.of(desired_premium)
        if not premium.is_positive:
            raise ValidationError("Desired premium must be positive", field="desired_premium")
        stamp = now or utc_now()
        return cls(
            id=application_id or uuid4(),
            client_id=client_id,
            service_id=service_id,
            desired_start_date=desired_start_date,
            desired_end_date=desired_end_date,
            desired_premium=premium.amount,
            notes=notes if notes and notes.strip() else None,
            created_at=stamp,
            updated_at=stamp,
        )

    def _move(self, action: str, now: datetime | None) -> None:
        transition = require_transition(
            APPLICATION_WORKFLOW, "Application", action, self.status.value,
        )
        self.status = ApplicationStatus(transition.to_state)
        self.updated_at = now or utc_now()

    def approve(self, agent_id: UUID | None, now: datetime | None = None) -> None:
        if agent_id is None:
            raise ValidationError("AgentId is required", field="agent_id")
        self._move("approve", now)
        self.processed_by_agent_id = agent_id

    def reject(self, reason: str | None, now: datetime | None = None) -> None:
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required", field="reason")
        self._move("reject", now)
        self.notes = append_note(self.notes, f"Rejected: {reason}")

    def process(self, agent_id: UUID | None, now: datetime | None = None) -> None:
        if agent_id is None:
            raise ValidationError("AgentId is required", field="agent_id")
        self._move("process", now)
        self.processed_by_agent_id = agent_id
