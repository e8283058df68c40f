"""
Parties and reference data -- clients, agents, insurance products.

Responsibility:
    Shared lookup entities referenced by id from contracts, payments,
    verifications and applications, plus the flat ``OperationRecord`` that
    the services append to the operation history.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  None of these
    entities own a contract; the repository joins them at read time.

Failure modes:
    - ValidationError from the ``create`` factories on blank names / emails,
      a non-positive default premium or an incomplete history record.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID, uuid4

from insurance_kernel.domain.clock import utc_now
from insurance_kernel.domain.values import Money
from insurance_kernel.exceptions import ValidationError


def _require_text(value: str | None, field: str, label: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{label} is required", field=field)
    return value.strip()


@dataclass(frozen=True)
class Client:
    """A natural person holding contracts.  ``email`` is the notice recipient."""

    id: UUID
    full_name: str
    email: str
    phone: str | None = None
    passport: str | None = None

    @classmethod
    def create(
        cls,
        full_name: str,
        email: str,
        phone: str | None = None,
        passport: str | None = None,
        client_id: UUID | None = None,
    ) -> Client:
        return cls(
            id=client_id or uuid4(),
            full_name=_require_text(full_name, "full_name", "FullName"),
            email=_require_text(email, "email", "Email"),
            phone=phone,
            passport=passport,
        )

    def with_contact(
        self,
        full_name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> Client:
        """Copy with updated contact details; blank name / email are kept."""
        return replace(
            self,
            full_name=full_name.strip() if full_name and full_name.strip() else self.full_name,
            email=email.strip() if email and email.strip() else self.email,
            phone=phone,
        )


@dataclass(frozen=True)
class Agent:
    id: UUID
    full_name: str
    email: str
    employee_number: str | None = None

    @classmethod
    def create(
        cls,
        full_name: str,
        email: str,
        employee_number: str | None = None,
        agent_id: UUID | None = None,
    ) -> Agent:
        return cls(
            id=agent_id or uuid4(),
            full_name=_require_text(full_name, "full_name", "FullName"),
            email=_require_text(email, "email", "Email"),
            employee_number=employee_number,
        )


@dataclass(frozen=True)
class InsuranceService:
    """An insurance product offered by the agency."""

    id: UUID
    name: str
    default_premium: Money
    description: str | None = None

    @classmethod
    def create(
        cls,
        name: str,
        default_premium: Money,
        description: str | None = None,
        service_id: UUID | None = None,
    ) -> InsuranceService:
        if default_premium is None or not default_premium.is_positive:
            raise ValidationError("Default premium must be positive", field="default_premium")
        return cls(
            id=service_id or uuid4(),
            name=_require_text(name, "name", "Name"),
            default_premium=default_premium,
            description=description,
        )


@dataclass(frozen=True)
class OperationRecord:
    """
    One line of the flat, append-only operation history.

    Not replayed and not part of any state machine; it only answers "who
    did what, to which entity, when".
    """

    id: UUID
    user_id: UUID
    operation_type: str
    description: str
    related_entity_id: UUID | None
    related_entity_type: str | None
    created_at: datetime

    @classmethod
    def create(
        cls,
        user_id: UUID | None,
        operation_type: str,
        description: str,
        related_entity_id: UUID | None = None,
        related_entity_type: str | None = None,
        now: datetime | None = None,
    ) -> OperationRecord:
        if user_id is None:
            raise ValidationError("UserId is required", field="user_id")
        return cls(
            id=uuid4(),
            user_id=user_id,
            operation_type=_require_text(operation_type, "operation_type", "OperationType"),
            description=_require_text(description, "description", "Description"),
            related_entity_id=related_entity_id,
            related_entity_type=related_entity_type,
            created_at=now or utc_now(),
        )
