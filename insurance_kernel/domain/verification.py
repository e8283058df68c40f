"""
DocumentVerification -- agency review of one item of a client's personal data.

Responsibility:
    Owns the per-document verification lifecycle (Pending -> Approved /
    Rejected, with re-review allowed) and the reviewing-agent assignment.
    The mandatory-document rules live in ``verification_policy``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - client_id is always set.
    - ``verified_by_agent_id`` is assigned once, by the first agent that
      reviews or is assigned; later reviewers do not overwrite it.
    - A rejection always carries a reason, recorded as "Rejected: {reason}".

Failure modes:
    - ValidationError on a missing client, agent or rejection reason.
    - InvalidTransitionError if ``VERIFICATION_WORKFLOW`` declares no
      transition for the review from the current status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import utc_now
from insurance_kernel.domain.values import append_note
from insurance_kernel.domain.workflow import (
    Transition,
    Workflow,
    from_every_state,
    require_transition,
)
from insurance_kernel.exceptions import ValidationError


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(str, Enum):
    """Personal data types a client may submit for verification."""

    FULL_NAME = "FullName"
    PASSPORT = "Passport"
    PHONE = "Phone"
    EMAIL = "Email"
    OTHER = "Other"


_VERIFICATION_STATES = tuple(s.value for s in VerificationStatus)

# Reviews are not one-way: an approved document may later be rejected and
# vice versa.
VERIFICATION_WORKFLOW = Workflow(
    name="document_verification",
    description="Agent review of a client's personal data",
    initial_state=VerificationStatus.PENDING.value,
    states=_VERIFICATION_STATES,
    transitions=(
        *from_every_state(_VERIFICATION_STATES, "approved", "approve"),
        *from_every_state(_VERIFICATION_STATES, "rejected", "reject"),
    ),
)


@dataclass(eq=False)
class DocumentVerification:
    """
    One reviewed (or awaiting review) item of personal data.

    ``verified_by_agent_id`` is None for a client self-submission until an
    agent is assigned or reviews it.
    """

    id: UUID
    client_id: UUID
    status: VerificationStatus = VerificationStatus.PENDING
    document_type: str | None = None
    document_number: str | None = None
    notes: str | None = None
    verified_by_agent_id: UUID | None = None
    verified_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def create(
        cls,
        client_id: UUID | None,
        document_type: str | None = None,
        document_number: str | None = None,
        notes: str | None = None,
        verified_by_agent_id: UUID | None = None,
        verification_id: UUID | None = None,
        now: datetime | None = None,
    ) -> DocumentVerification:
        if client_id is None:
            raise ValidationError("ClientId is required", field="client_id")
        stamp = now or utc_now()
        return cls(
            id=verification_id or uuid4(),
            client_id=client_id,
            document_type=document_type,
            document_number=document_number,
            notes=notes if notes and notes.strip() else None,
            verified_by_agent_id=verified_by_agent_id,
            verified_at=stamp,
            created_at=stamp,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == VerificationStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == VerificationStatus.APPROVED

    def _transition(self, action: str) -> Transition:
        return require_transition(
            VERIFICATION_WORKFLOW, "DocumentVerification", action, self.status.value,
        )

    def assign_agent(self, agent_id: UUID | None) -> None:
        """Set the reviewing agent if none is set yet.  Status is unchanged."""
        if agent_id is None:
            raise ValidationError("AgentId is required", field="agent_id")
        if self.verified_by_agent_id is None:
            self.verified_by_agent_id = agent_id

    def approve(
        self,
        agent_id: UUID | None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> None:
        transition = self._transition("approve")
        self.assign_agent(agent_id)
        self.status = VerificationStatus(transition.to_state)
        self.notes = append_note(self.notes, notes)
        self.verified_at = now or utc_now()

    def reject(
        self,
        agent_id: UUID | None,
        reason: str | None,
        now: datetime | None = None,
    ) -> None:
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required", field="reason")
        transition = self._transition("reject")
        self.assign_agent(agent_id)
        self.status = VerificationStatus(transition.to_state)
        self.notes = append_note(self.notes, f"Rejected: {reason}")
        self.verified_at = now or utc_now()

    def __repr__(self) -> str:
        return (
            f"<DocumentVerification {self.document_type} {self.status.value} "
            f"client={self.client_id}>"
        )
